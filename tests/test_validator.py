"""Tests for two-stage transaction draft validation."""

from datetime import date, datetime, timedelta, timezone

import pytest

from homeledger.models import Currency, TransactionDraft, TransactionType
from homeledger.validation import (
    ConfirmationRequiredError,
    TransactionValidationError,
    TransactionValidator,
)


EXPENSE = TransactionType.EXPENSE
INCOME = TransactionType.INCOME
TRANSFER = TransactionType.TRANSFER


@pytest.fixture
def validator():
    return TransactionValidator()


@pytest.fixture
def accounts(uah_card, uah_cash, usd_savings):
    return [uah_card, uah_cash, usd_savings]


@pytest.fixture
def categories(groceries, salary):
    return [groceries, salary]


def issue_types(result):
    return {(i.field, i.issue_type) for i in result.issues}


class TestSchemaValidation:
    """Stage 1: required fields and references."""

    def test_valid_expense(self, validator, accounts, categories):
        draft = TransactionDraft(amount=120, account_id="uah", category_id="groceries")
        result = validator.validate(draft, accounts, categories)

        assert result.is_valid
        assert result.schema_valid
        assert result.semantic_valid
        assert not result.requires_confirmation
        assert result.issues == []

    def test_missing_amount(self, validator, accounts, categories):
        draft = TransactionDraft(account_id="uah", category_id="groceries")
        result = validator.validate(draft, accounts, categories)

        assert not result.is_valid
        assert ("amount", "missing") in issue_types(result)

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount(self, validator, accounts, categories, amount):
        draft = TransactionDraft(amount=amount, account_id="uah", category_id="groceries")
        result = validator.validate(draft, accounts, categories)

        assert ("amount", "invalid_value") in issue_types(result)

    def test_missing_and_unknown_account(self, validator, accounts, categories):
        missing = validator.validate(TransactionDraft(amount=1, category_id="groceries"), accounts, categories)
        unknown = validator.validate(
            TransactionDraft(amount=1, account_id="nope", category_id="groceries"), accounts, categories
        )

        assert ("account_id", "missing") in issue_types(missing)
        assert ("account_id", "unknown_reference") in issue_types(unknown)

    def test_category_required_for_expense(self, validator, accounts, categories):
        result = validator.validate(TransactionDraft(amount=1, account_id="uah"), accounts, categories)
        assert ("category_id", "missing") in issue_types(result)

    def test_unknown_category(self, validator, accounts, categories):
        draft = TransactionDraft(amount=1, account_id="uah", category_id="deleted")
        result = validator.validate(draft, accounts, categories)
        assert ("category_id", "unknown_reference") in issue_types(result)

    def test_non_positive_rate(self, validator, accounts, categories):
        draft = TransactionDraft(amount=1, account_id="usd", category_id="groceries", rate=0)
        result = validator.validate(draft, accounts, categories)
        assert ("rate", "invalid_value") in issue_types(result)

    def test_transfer_needs_other_account(self, validator, accounts, categories):
        draft = TransactionDraft(type=TRANSFER, amount=10, account_id="uah", to_account_id="uah")
        result = validator.validate(draft, accounts, categories)

        assert not result.is_valid
        assert ("to_account_id", "missing") in issue_types(result)

    def test_transfer_needs_no_category(self, validator, accounts, categories):
        draft = TransactionDraft(type=TRANSFER, amount=10, account_id="uah", to_account_id="cash")
        assert validator.validate(draft, accounts, categories).is_valid

    def test_multi_currency_transfer_needs_credited_amount(self, validator, accounts, categories):
        draft = TransactionDraft(type=TRANSFER, amount=4000, rate=40, account_id="uah", to_account_id="usd")
        result = validator.validate(draft, accounts, categories)
        assert ("to_amount", "missing") in issue_types(result)

    def test_stage_two_skipped_on_errors(self, validator, accounts, categories):
        draft = TransactionDraft(amount=None, account_id="uah", category_id="salary")
        result = validator.validate(draft, accounts, categories)

        assert not result.semantic_valid
        assert result.warnings == []


class TestSemanticValidation:
    """Stage 2: warnings the user can confirm."""

    def test_reconciliation_mismatch_needs_confirmation(self, validator, accounts, categories):
        draft = TransactionDraft(
            type=TRANSFER, amount=4000, to_amount=90, rate=40,
            account_id="uah", to_account_id="usd",
        )
        result = validator.validate(draft, accounts, categories)

        assert result.is_valid
        assert result.requires_confirmation
        assert result.reconciliation.difference == pytest.approx(10)
        assert [w.issue_type for w in result.warnings] == ["reconciliation_mismatch"]

    def test_reconciled_transfer_passes(self, validator, accounts, categories):
        draft = TransactionDraft(
            type=TRANSFER, amount=100, to_amount=4000, rate=40,
            account_id="usd", to_account_id="uah",
        )
        result = validator.validate(draft, accounts, categories)

        assert result.semantic_valid
        assert not result.requires_confirmation
        assert result.reconciliation.expected_destination == 4000

    def test_tolerance_is_configurable(self, accounts, categories):
        draft = TransactionDraft(
            type=TRANSFER, amount=4000, to_amount=90, rate=40,
            account_id="uah", to_account_id="usd",
        )
        result = TransactionValidator(tolerance=50).validate(draft, accounts, categories)
        assert not result.requires_confirmation

    def test_category_type_mismatch_is_warning_only(self, validator, accounts, categories):
        draft = TransactionDraft(type=EXPENSE, amount=10, account_id="uah", category_id="salary")
        result = validator.validate(draft, accounts, categories)

        assert result.is_valid
        assert not result.semantic_valid
        assert not result.requires_confirmation
        assert ("category_id", "inconsistent") in issue_types(result)


class TestToTransaction:
    """Tests for turning drafts into stored transactions."""

    def test_expense_fields(self, validator, accounts, categories):
        draft = TransactionDraft(
            amount=120, account_id="uah", category_id="groceries",
            note="  bread  ", date=date(2024, 3, 5),
        )
        t = validator.to_transaction(draft, accounts, categories)

        assert t.amount == 120
        assert t.currency == Currency.UAH
        assert t.exchange_rate == 1.0
        assert t.note == "bread"
        assert t.date == datetime(2024, 3, 5, tzinfo=timezone.utc)
        assert t.to_account_id is None
        assert t.id

    def test_foreign_source_freezes_rate(self, validator, accounts, categories):
        draft = TransactionDraft(amount=10, rate=41.0, account_id="usd", category_id="groceries")
        t = validator.to_transaction(draft, accounts, categories)

        assert t.currency == Currency.USD
        assert t.exchange_rate == 41.0
        assert t.base_amount == 410

    def test_foreign_source_defaults_to_account_rate(self, validator, accounts, categories):
        draft = TransactionDraft(amount=10, account_id="usd", category_id="groceries")
        assert validator.to_transaction(draft, accounts, categories).exchange_rate == 41.5

    def test_base_source_ignores_entered_rate(self, validator, accounts, categories):
        draft = TransactionDraft(
            type=TRANSFER, amount=4000, to_amount=100, rate=40,
            account_id="uah", to_account_id="usd",
        )
        t = validator.to_transaction(draft, accounts, categories)

        assert t.exchange_rate == 1.0
        assert t.to_amount == 100
        assert t.category_id == "transfer"

    def test_transfer_drops_category(self, validator, accounts, categories):
        draft = TransactionDraft(
            type=TRANSFER, amount=5, account_id="uah", to_account_id="cash", category_id="groceries",
        )
        assert validator.to_transaction(draft, accounts, categories).category_id == "transfer"

    def test_non_transfer_drops_destination(self, validator, accounts, categories):
        draft = TransactionDraft(
            type=INCOME, amount=5, account_id="uah", to_account_id="cash", category_id="salary",
        )
        t = validator.to_transaction(draft, accounts, categories)

        assert t.to_account_id is None
        assert t.to_amount is None

    def test_invalid_draft_raises(self, validator, accounts, categories):
        with pytest.raises(TransactionValidationError) as exc_info:
            validator.to_transaction(TransactionDraft(account_id="uah"), accounts, categories)
        assert exc_info.value.result.has_errors

    def test_mismatch_needs_confirmation(self, validator, accounts, categories):
        draft = TransactionDraft(
            type=TRANSFER, amount=4000, to_amount=90, rate=40,
            account_id="uah", to_account_id="usd",
        )
        with pytest.raises(ConfirmationRequiredError):
            validator.to_transaction(draft, accounts, categories)

        t = validator.to_transaction(draft, accounts, categories, confirmed=True)
        assert t.to_amount == 90

    def test_keeps_draft_id(self, validator, accounts, categories):
        draft = TransactionDraft(id="t-1", amount=1, account_id="uah", category_id="groceries")
        assert validator.to_transaction(draft, accounts, categories).id == "t-1"

    def test_plain_date_uses_validator_zone(self, accounts, categories):
        kyiv = timezone(timedelta(hours=3))
        draft = TransactionDraft(
            amount=120, account_id="uah", category_id="groceries", date=date(2024, 4, 1),
        )
        t = TransactionValidator(tz=kyiv).to_transaction(draft, accounts, categories)

        assert t.date == datetime(2024, 4, 1, tzinfo=kyiv)
        assert t.date.astimezone(timezone.utc).month == 3

    def test_full_timestamp_kept_as_is(self, validator, accounts, categories):
        when = datetime(2024, 3, 5, 18, 45, tzinfo=timezone.utc)
        draft = TransactionDraft(amount=1, account_id="uah", category_id="groceries", date=when)
        assert validator.to_transaction(draft, accounts, categories).date == when


class TestSummary:
    """Tests for the user-facing summary."""

    def test_all_passed(self, validator, accounts, categories):
        result = validator.validate(
            TransactionDraft(amount=1, account_id="uah", category_id="groceries"), accounts, categories
        )
        assert "All checks passed" in validator.get_user_friendly_summary(result)

    def test_lists_errors_and_fixes(self, validator, accounts, categories):
        result = validator.validate(TransactionDraft(account_id="uah"), accounts, categories)
        summary = validator.get_user_friendly_summary(result)

        assert "Amount is required" in summary
        assert "Choose a category" in summary
        assert "fix the issues" in summary

    def test_mentions_confirmation(self, validator, accounts, categories):
        draft = TransactionDraft(
            type=TRANSFER, amount=4000, to_amount=90, rate=40,
            account_id="uah", to_account_id="usd",
        )
        summary = validator.get_user_friendly_summary(validator.validate(draft, accounts, categories))

        assert "Amounts do not match the rate" in summary
        assert "confirming" in summary
