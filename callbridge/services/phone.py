# callbridge/services/phone.py
import re
from typing import Any, List, Optional

_NON_DIGITS = re.compile(r"\D+")

NANP_COUNTRY_CODE = "1"


def normalize_phone(raw: Any) -> Optional[str]:
    """
    Canonical form used for every DID / caller lookup and write: digits only.

    "+1 (555) 123-4567" -> "15551234567". None -> None. Any string, including
    "" and values with no digits at all ("ext"), maps to its digits, possibly
    "", so normalize_phone(normalize_phone(x)) == normalize_phone(x).
    """
    if raw is None:
        return None
    s = raw if isinstance(raw, str) else str(raw)
    return _NON_DIGITS.sub("", s)


def did_variants(did: Optional[str]) -> List[str]:
    """
    Normalized forms that dial the same North American DID.

    Vodia sends the dialed number with or without the leading country code,
    so "15550001111" and "5550001111" are the same line. The exact form comes
    first. Anything that is not a 10 digit number or an 11 digit number
    starting with 1 only matches itself.
    """
    if not did:
        return []
    if len(did) == 10 and did.isdigit():
        return [did, NANP_COUNTRY_CODE + did]
    if len(did) == 11 and did.isdigit() and did.startswith(NANP_COUNTRY_CODE):
        return [did, did[1:]]
    return [did]
