"""Tests for snapshot storage, migration and backups."""

import json
from datetime import date

import pytest

from homeledger.models import AccountType, AppData, TransactionType
from homeledger.models.defaults import CURRENT_SCHEMA_VERSION, DEFAULT_RATES
from homeledger.services.storage import (
    InMemoryStorage,
    InvalidFormatError,
    JsonFileStorage,
    StorageError,
    export_filename,
    export_json,
    guess_account_icon,
    import_json,
    migrate_snapshot,
    parse_snapshot,
)


@pytest.fixture
def legacy_raw():
    """A snapshot written before types, icons, rates and budget history."""
    return {
        "accounts": [
            {"id": "a1", "name": "Готівка", "currency": "UAH", "initialBalance": 100},
            {"id": "a2", "name": "Bank card", "currency": "UAH", "initialBalance": 0},
            {"id": "a3", "name": "Cash USD", "currency": "USD", "initialBalance": 10},
        ],
        "categories": [
            {"id": "c1", "name": "Food", "type": "EXPENSE", "color": "#fff", "icon": "x", "monthlyBudget": 800},
            {"id": "c2", "name": "Pay", "type": "INCOME", "color": "#fff", "icon": "y"},
        ],
        "transactions": [
            {"id": "t1", "date": "2024-03-01T10:00:00.000Z", "amount": 50,
             "currency": "UAH", "accountId": "a1", "categoryId": "c1", "type": "EXPENSE"},
            {"id": "t2", "date": "2024-03-02T10:00:00.000Z", "amount": 20,
             "currency": "UAH", "accountId": "a1", "toAccountId": "a2", "type": "TRANSFER"},
        ],
    }


class TestMigration:
    """Tests for backfilling old snapshots."""

    def test_backfills_accounts(self, legacy_raw):
        accounts = migrate_snapshot(legacy_raw)["accounts"]

        assert all(a["type"] == "CURRENT" for a in accounts)
        assert all(a["currentRate"] == 1 for a in accounts)
        assert all(a["isHidden"] is False for a in accounts)
        assert [a["icon"] for a in accounts] == ["wallet", "credit-card", "banknote"]

    def test_backfills_categories(self, legacy_raw):
        categories = migrate_snapshot(legacy_raw)["categories"]

        assert categories[0]["budgetHistory"] == {"1970-01": 800}
        assert categories[1]["monthlyBudget"] == 0
        assert categories[1]["budgetHistory"] == {"1970-01": 0}

    def test_backfills_transactions(self, legacy_raw):
        transactions = migrate_snapshot(legacy_raw)["transactions"]

        assert all(t["exchangeRate"] == 1 for t in transactions)
        assert transactions[0]["categoryId"] == "c1"
        assert transactions[1]["categoryId"] == "transfer"

    def test_backfills_rates_and_settings(self, legacy_raw):
        migrated = migrate_snapshot(legacy_raw)

        assert migrated["rates"] == DEFAULT_RATES
        assert migrated["settings"] == {"numberFormat": "decimal", "theme": "light"}
        assert migrated["schemaVersion"] == CURRENT_SCHEMA_VERSION

    def test_input_untouched(self, legacy_raw):
        before = json.dumps(legacy_raw, sort_keys=True)
        migrate_snapshot(legacy_raw)
        assert json.dumps(legacy_raw, sort_keys=True) == before

    def test_current_snapshot_left_alone(self, legacy_raw):
        migrated = migrate_snapshot(legacy_raw)
        migrated["accounts"][0]["icon"] = ""
        again = migrate_snapshot(migrated)
        assert again["accounts"][0]["icon"] == ""

    def test_existing_values_kept(self, legacy_raw):
        legacy_raw["accounts"][2].update(type="SAVINGS", currentRate=41.5, icon="piggy-bank")
        legacy_raw["rates"] = {"USD": 39.0}
        migrated = migrate_snapshot(legacy_raw)

        assert migrated["accounts"][2]["type"] == "SAVINGS"
        assert migrated["accounts"][2]["currentRate"] == 41.5
        assert migrated["accounts"][2]["icon"] == "piggy-bank"
        assert migrated["rates"] == {"USD": 39.0}

    def test_missing_lists_become_empty(self):
        migrated = migrate_snapshot({})
        assert migrated["accounts"] == migrated["categories"] == migrated["transactions"] == []

    @pytest.mark.parametrize("raw", [
        [],
        "snapshot",
        {"accounts": {}},
        {"categories": [None]},
        {"schemaVersion": "2"},
        {"schemaVersion": True},
    ])
    def test_rejects_wrong_shapes(self, raw):
        with pytest.raises(InvalidFormatError):
            migrate_snapshot(raw)

    def test_parse_migrated_snapshot(self, legacy_raw):
        data = parse_snapshot(migrate_snapshot(legacy_raw))

        assert isinstance(data, AppData)
        assert data.account_by_id("a3").type == AccountType.CURRENT
        assert data.transaction_by_id("t2").type == TransactionType.TRANSFER
        assert data.transaction_by_id("t2").to_account_id == "a2"

    def test_nameless_account_gets_default_icon(self):
        migrated = migrate_snapshot({"accounts": [{"id": "a1", "name": None}]})
        assert migrated["accounts"][0]["icon"] == "wallet"

    def test_parse_rejects_bad_records(self):
        with pytest.raises(InvalidFormatError):
            parse_snapshot({"accounts": [{"id": "a1"}]})

    @pytest.mark.parametrize("name,icon", [
        ("Monobank card", "credit-card"),
        ("Картка", "credit-card"),
        ("ПриватБанк", "landmark"),
        ("Savings usd", "banknote"),
        ("Piggy", "wallet"),
    ])
    def test_icon_guess(self, name, icon):
        assert guess_account_icon(name) == icon


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_empty_loads_starter_data(self):
        storage = InMemoryStorage()
        data = storage.load()

        assert not storage.exists()
        assert [a.id for a in data.accounts] == ["a1", "a2", "a3", "a4"]
        assert len(data.categories) == 8
        assert data.transactions == []

    def test_save_then_load(self, legacy_raw):
        storage = InMemoryStorage(legacy_raw)
        data = storage.load()
        storage.save(data.model_copy(update={"rates": {"USD": 42.0}}))

        assert storage.save_count == 1
        assert storage.load().rates == {"USD": 42.0}


class TestJsonFileStorage:
    """Tests for the JSON file backend."""

    def test_missing_file_loads_starter_data(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "ledger.json")

        assert not storage.exists()
        assert len(storage.load().accounts) == 4

    def test_save_writes_camel_case(self, tmp_path):
        path = tmp_path / "nested" / "ledger.json"
        storage = JsonFileStorage(path)
        storage.save(storage.load())

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert storage.exists()
        assert "initialBalance" in raw["accounts"][0]
        assert raw["schemaVersion"] == CURRENT_SCHEMA_VERSION
        assert list(path.parent.iterdir()) == [path]

    def test_save_then_load(self, tmp_path, legacy_raw):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps(legacy_raw), encoding="utf-8")
        storage = JsonFileStorage(path)

        data = storage.load()
        storage.save(data)
        reloaded = storage.load()

        assert reloaded == data
        assert reloaded.category_by_id("c1").budget_history == {"1970-01": 800}

    def test_corrupted_file_raises(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(InvalidFormatError):
            JsonFileStorage(path).load()
        assert path.read_text(encoding="utf-8") == "{not json"

    def test_unreadable_file_raises(self, tmp_path, monkeypatch):
        path = tmp_path / "ledger.json"
        path.write_text("{}", encoding="utf-8")

        def refuse(*args, **kwargs):
            raise PermissionError("denied")

        monkeypatch.setattr(type(path), "read_text", refuse)
        with pytest.raises(StorageError):
            JsonFileStorage(path).load()

    def test_malformed_entries_raise_invalid_format(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"accounts": [42], "transactions": []}), encoding="utf-8")

        with pytest.raises(InvalidFormatError):
            JsonFileStorage(path).load()

    def test_default_path_from_settings(self, monkeypatch, tmp_path):
        from homeledger.config import get_settings

        monkeypatch.setenv("HOMELEDGER_STORAGE_DATA_PATH", str(tmp_path / "custom.json"))
        get_settings.cache_clear()

        assert JsonFileStorage().path == tmp_path / "custom.json"

    def test_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        storage = JsonFileStorage(blocker / "ledger.json", retry_attempts=1)

        with pytest.raises(StorageError):
            storage.save(AppData())


class TestBackup:
    """Tests for backup export and import."""

    def test_filename(self):
        assert export_filename(date(2024, 3, 9)) == "budget_backup_2024-03-09.json"
        assert export_filename(date(2024, 3, 9), prefix="x_") == "x_2024-03-09.json"

    def test_export_is_indented_json(self):
        text = export_json(InMemoryStorage().load())

        assert text.startswith("{\n  ")
        assert json.loads(text)["accounts"][0]["id"] == "a1"

    def test_export_keeps_non_ascii(self, legacy_raw):
        text = export_json(InMemoryStorage(legacy_raw).load())
        assert "Готівка" in text

    def test_import_migrates(self, legacy_raw):
        data = import_json(json.dumps(legacy_raw))
        assert data.schema_version == CURRENT_SCHEMA_VERSION
        assert data.transaction_by_id("t2").category_id == "transfer"

    def test_export_then_import(self, legacy_raw):
        data = InMemoryStorage(legacy_raw).load()
        assert import_json(export_json(data)) == data

    @pytest.mark.parametrize("text", [
        "not json",
        "[]",
        json.dumps({"accounts": []}),
        json.dumps({"transactions": []}),
        json.dumps({"transactions": [], "accounts": [1]}),
        json.dumps({"transactions": ["t1"], "accounts": []}),
        json.dumps({"transactions": [], "accounts": [{"id": "a1", "name": None}]}),
        json.dumps({"transactions": [], "accounts": [], "schemaVersion": "2"}),
        json.dumps({"transactions": [], "accounts": [], "rates": {"USD": "lots"}}),
    ])
    def test_import_rejects_incomplete(self, text):
        with pytest.raises(InvalidFormatError):
            import_json(text)
