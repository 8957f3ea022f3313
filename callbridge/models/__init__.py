from .subaccount import Subaccount
from .user import User
from .call_log import CallLog

__all__ = ["Subaccount", "User", "CallLog"]
