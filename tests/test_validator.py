"""Tests for form input validation."""

from datetime import date
from decimal import Decimal

import pytest

from src.models.finance import PaymentMethod, TransactionType
from src.validation import FormInputValidator


@pytest.fixture
def validator():
    return FormInputValidator()


def issue_types(result) -> dict[str, str]:
    return {issue.field: issue.issue_type for issue in result.issues}


class TestAmountParsing:
    """Tests for amounts typed by the user."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("12.50", Decimal("12.50")),
            ("12,50", Decimal("12.50")),
            (" 7 ", Decimal("7.00")),
            ("0.005", Decimal("0.00")),
            ("1 250,75", Decimal("1250.75")),
        ],
    )
    def test_accepts(self, validator, raw, expected):
        issues = []
        assert validator.parse_amount(raw, issues) == expected
        assert not [i for i in issues if i.severity == "error"]

    @pytest.mark.parametrize(
        "raw, issue_type",
        [
            ("", "missing"),
            (None, "missing"),
            ("abc", "invalid_format"),
            ("NaN", "invalid_format"),
            ("Infinity", "invalid_format"),
            ("-5", "invalid_value"),
            ("1e400", "invalid_value"),
        ],
    )
    def test_rejects(self, validator, raw, issue_type):
        issues = []
        assert validator.parse_amount(raw, issues) is None
        assert issues[0].severity == "error"
        assert issues[0].issue_type == issue_type

    def test_zero_is_a_warning(self, validator):
        issues = []
        assert validator.parse_amount("0", issues) == Decimal("0.00")
        assert issues[0].severity == "warning"

    def test_huge_amount_is_a_warning(self, validator):
        """Test that amounts above the configured maximum are flagged, not rejected."""
        issues = []
        assert validator.parse_amount("2000000", issues) == Decimal("2000000.00")
        assert issues[0].severity == "warning"
        assert issues[0].issue_type == "suspicious_value"


class TestTransactionForm:
    """Tests for the day form."""

    def test_income_defaults_to_card(self, validator):
        result, draft = validator.validate_transaction(
            date="2024-03-05",
            transaction_type="income",
            amount="1500",
            description="Nómina",
        )
        assert result.is_valid
        assert draft.type == TransactionType.INCOME
        assert draft.payment_method == PaymentMethod.CARD
        assert draft.amount == Decimal("1500.00")

    def test_income_paid_in_cash(self, validator):
        _, draft = validator.validate_transaction(
            date="2024-03-05",
            transaction_type="income",
            amount="20",
            payment_method="cash",
        )
        assert draft.payment_method == PaymentMethod.CASH

    def test_expense_never_has_payment_method(self, validator):
        """Test that a payment method sent with an expense is dropped."""
        _, draft = validator.validate_transaction(
            date="2024-03-05",
            transaction_type="expense",
            amount="20",
            payment_method="cash",
        )
        assert draft.type == TransactionType.EXPENSE
        assert draft.payment_method is None

    def test_empty_description_gets_default(self, validator):
        _, draft = validator.validate_transaction(
            date="2024-03-05",
            transaction_type="expense",
            amount="20",
            description="   ",
        )
        assert draft.description == "Sin descripción"

    def test_collects_every_error(self, validator):
        """Test that all fields are checked, not just the first bad one."""
        result, draft = validator.validate_transaction(
            date="2024-02-30",
            transaction_type="transfer",
            amount="x",
        )
        assert draft is None
        assert result.error_count == 3
        assert issue_types(result) == {
            "date": "invalid_format",
            "type": "invalid_value",
            "amount": "invalid_format",
        }

    def test_week_date_rejected(self, validator):
        result, draft = validator.validate_transaction(
            date="2024-W10-2",
            transaction_type="income",
            amount="10",
        )
        assert draft is None
        assert issue_types(result) == {"date": "invalid_format"}

    def test_description_too_long(self, validator):
        result, draft = validator.validate_transaction(
            date="2024-03-05",
            transaction_type="expense",
            amount="1",
            description="x" * 201,
        )
        assert draft is None
        assert issue_types(result) == {"description": "too_long"}

    def test_invalid_payment_method(self, validator):
        result, draft = validator.validate_transaction(
            date="2024-03-05",
            transaction_type="income",
            amount="20",
            payment_method="bizum",
        )
        assert draft is None
        assert "payment_method" in issue_types(result)


class TestMonthlyExpenseForm:
    """Tests for fixed expenses, variable expenses and taxes."""

    def test_valid(self, validator):
        result, draft = validator.validate_monthly_expense(
            month="2024-03",
            amount="700",
            description="Alquiler",
        )
        assert result.form == "fixed_expense"
        assert draft.description == "Alquiler"
        assert draft.amount == Decimal("700.00")

    def test_form_name_is_kept(self, validator):
        result, _ = validator.validate_monthly_expense(
            month="2024-03",
            amount="100",
            description="IVA",
            form="tax",
        )
        assert result.form == "tax"

    def test_description_required(self, validator):
        result, draft = validator.validate_monthly_expense(
            month="2024-03",
            amount="700",
            description="",
        )
        assert draft is None
        assert issue_types(result) == {"description": "missing"}

    def test_bad_month(self, validator):
        result, draft = validator.validate_monthly_expense(
            month="2024-13",
            amount="700",
            description="Alquiler",
        )
        assert draft is None
        assert issue_types(result) == {"month": "invalid_format"}


class TestBillForm:
    """Tests for the bill form."""

    def test_valid(self, validator):
        result, draft = validator.validate_bill(
            creditor="Iberdrola",
            amount="80,25",
            due_date="2024-03-10",
        )
        assert result.is_valid
        assert draft.creditor == "Iberdrola"
        assert draft.amount == Decimal("80.25")
        assert draft.due_date == date(2024, 3, 10)
        assert draft.description == "Sin descripción"

    def test_required_fields(self, validator):
        result, draft = validator.validate_bill(creditor="", amount="", due_date="")
        assert draft is None
        assert issue_types(result) == {
            "creditor": "missing",
            "amount": "missing",
            "due_date": "missing",
        }

    def test_long_bill_description(self, validator):
        result, draft = validator.validate_bill(
            creditor="Iberdrola",
            amount="80",
            due_date="2024-03-10",
            description="x" * 500,
        )
        assert result.is_valid
        assert len(draft.description) == 500

        result, draft = validator.validate_bill(
            creditor="Iberdrola",
            amount="80",
            due_date="2024-03-10",
            description="x" * 501,
        )
        assert draft is None
        assert issue_types(result) == {"description": "too_long"}


class TestSummary:
    """Tests for the text shown under a form."""

    def test_success(self, validator):
        result, _ = validator.validate_bill(
            creditor="Iberdrola",
            amount="80",
            due_date="2024-03-10",
        )
        assert validator.get_user_friendly_summary(result).startswith("✅")

    def test_errors_listed(self, validator):
        result, _ = validator.validate_bill(creditor="", amount="-1", due_date="2024-03-10")
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("❌")
        assert "El acreedor es obligatorio" in summary
        assert "El importe no puede ser negativo" in summary

    def test_warnings_listed(self, validator):
        result, _ = validator.validate_bill(creditor="A", amount="0", due_date="2024-03-10")
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("⚠️")
        assert "El importe es cero" in summary
