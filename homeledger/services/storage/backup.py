"""
Backup Import / Export

Backups are the snapshot itself as pretty-printed JSON. How the text
travels (file, clipboard, share sheet) is up to the caller.
"""

import json
from datetime import date
from typing import Optional

from homeledger.models.entities import AppData
from homeledger.services.storage.interface import InvalidFormatError
from homeledger.services.storage.migration import migrate_snapshot, parse_snapshot


DEFAULT_BACKUP_PREFIX = "budget_backup_"


def export_json(data: AppData) -> str:
    """Snapshot as indented JSON in its stored (camelCase) shape."""
    return json.dumps(
        data.model_dump(mode="json", by_alias=True),
        indent=2,
        ensure_ascii=False,
    )


def export_filename(today: Optional[date] = None, prefix: str = DEFAULT_BACKUP_PREFIX) -> str:
    """File name for a backup taken on `today` (defaults to the current date)."""
    today = today or date.today()
    return f"{prefix}{today.isoformat()}.json"


def import_json(text: str) -> AppData:
    """
    Parse a backup.

    A backup must at least carry `transactions` and `accounts`; everything
    else is backfilled by migration.

    Raises:
        InvalidFormatError: If the text is not a usable backup
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidFormatError(f"Backup is not valid JSON: {e}") from e

    if not isinstance(raw, dict) or "transactions" not in raw or "accounts" not in raw:
        raise InvalidFormatError("Backup must contain 'transactions' and 'accounts'")

    return parse_snapshot(migrate_snapshot(raw))
