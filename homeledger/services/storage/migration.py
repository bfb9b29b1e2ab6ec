"""
Schema Migration

Stored snapshots predate several fields. Before a snapshot reaches the
engine, missing fields are backfilled here so the engine never has to
guess. Migration works on the raw JSON dict and never changes its input.

Each step is tagged with the schema version it upgrades to. A snapshot
without `schemaVersion` is version 1.
"""

import copy
from collections.abc import Callable

from pydantic import ValidationError

from homeledger.engine.budgets import LEGACY_BUDGET_KEY
from homeledger.models.defaults import CURRENT_SCHEMA_VERSION, DEFAULT_RATES
from homeledger.models.entities import (
    TRANSFER_CATEGORY_ID,
    AccountType,
    AppData,
    TransactionType,
    UserSettings,
)
from homeledger.observability import get_logger
from homeledger.services.storage.interface import InvalidFormatError


log = get_logger(__name__)


def guess_account_icon(name: str) -> str:
    """Icon for an account stored before accounts had icons."""
    lowered = name.lower()
    if "карт" in lowered or "card" in lowered:
        return "credit-card"
    if "банк" in lowered or "bank" in lowered:
        return "landmark"
    if "usd" in lowered or "eur" in lowered:
        return "banknote"
    return "wallet"


def _backfill_v2(raw: dict) -> None:
    """Fill every field added after the first release."""
    if not raw.get("rates"):
        raw["rates"] = dict(DEFAULT_RATES)

    if not isinstance(raw.get("settings"), dict):
        raw["settings"] = UserSettings().model_dump(by_alias=True)

    for account in raw.get("accounts", []):
        if not account.get("type"):
            account["type"] = AccountType.CURRENT.value
        if not account.get("currentRate"):
            account["currentRate"] = 1
        if not account.get("icon"):
            account["icon"] = guess_account_icon(account.get("name") or "")
        account.setdefault("isHidden", False)

    for category in raw.get("categories", []):
        if category.get("monthlyBudget") is None:
            category["monthlyBudget"] = 0
        if not category.get("budgetHistory"):
            category["budgetHistory"] = {LEGACY_BUDGET_KEY: category["monthlyBudget"]}

    for transaction in raw.get("transactions", []):
        if transaction.get("exchangeRate") is None:
            transaction["exchangeRate"] = 1
        if transaction.get("type") == TransactionType.TRANSFER.value and not transaction.get("categoryId"):
            transaction["categoryId"] = TRANSFER_CATEGORY_ID


MIGRATIONS: list[tuple[int, Callable[[dict], None]]] = [
    (2, _backfill_v2),
]


def migrate_snapshot(raw: dict) -> dict:
    """
    Upgrade a raw snapshot dict to the current schema.

    Returns a new dict tagged with `schemaVersion`.

    Raises:
        InvalidFormatError: If `raw` is not a snapshot-shaped dict
    """
    if not isinstance(raw, dict):
        raise InvalidFormatError(f"Snapshot must be a JSON object, got {type(raw).__name__}")

    migrated = copy.deepcopy(raw)
    for key in ("accounts", "categories", "transactions"):
        value = migrated.setdefault(key, [])
        if not isinstance(value, list):
            raise InvalidFormatError(f"Snapshot field {key!r} must be a list")
        if not all(isinstance(item, dict) for item in value):
            raise InvalidFormatError(f"Every entry of {key!r} must be an object")

    version = migrated.get("schemaVersion") or 1
    # bool is an int subclass but never a version.
    if not isinstance(version, int) or isinstance(version, bool):
        raise InvalidFormatError(f"schemaVersion must be an integer, got {version!r}")
    for target_version, step in MIGRATIONS:
        if version < target_version:
            step(migrated)
            log.info("snapshot_migrated", from_version=version, to_version=target_version)
            version = target_version

    migrated["schemaVersion"] = max(version, CURRENT_SCHEMA_VERSION)
    return migrated


def parse_snapshot(raw: dict) -> AppData:
    """
    Validate a migrated snapshot dict.

    Raises:
        InvalidFormatError: If the data does not match the snapshot schema
    """
    try:
        return AppData.model_validate(raw)
    except ValidationError as e:
        raise InvalidFormatError(f"Snapshot does not match the expected schema: {e}") from e
