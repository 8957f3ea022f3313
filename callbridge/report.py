# callbridge/report.py
"""
Read-only snapshot of what the router has stored.

    python -m callbridge.report --limit 50

Same data as GET /admin/report, for when the API is not reachable.
"""
from __future__ import annotations

import argparse
import json
from typing import Any, Dict, Optional

from .config import Settings
from .services.db import Database
from .services.directory import SubaccountDirectory
from .services.identity import IdentityStore
from .services.ledger import EventLedger


def snapshot(
    directory: SubaccountDirectory,
    identities: IdentityStore,
    ledger: EventLedger,
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    return {
        "subaccounts": [s.to_dict() for s in directory.list_all()],
        "users": [u.to_dict() for u in identities.list_all(limit=limit)],
        "callLogs": [c.to_dict() for c in ledger.list_recent(limit=limit)],
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Dump subaccounts, users and call logs as JSON.")
    parser.add_argument("--limit", type=int, default=None, help="max users / call logs to print")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    db = Database.from_settings(settings)
    try:
        data = snapshot(SubaccountDirectory(db), IdentityStore(db), EventLedger(db), limit=args.limit)
    finally:
        db.dispose()
    print(json.dumps(data, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
