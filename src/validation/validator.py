"""
Form Input Validation

DESIGN DECISION: The storage core never sees raw user input. Everything the
UI collects arrives here as strings, is parsed into typed drafts, and only
drafts reach storage. Malformed input is rejected with issues the UI can
show next to the form.

Checks happen in two passes, as in any form:
1. Structural: required fields present, numbers and dates parse
2. Semantic: values that parse but look suspicious (zero, huge amounts)
   are flagged as warnings and still accepted

IMPORTANT: Validation never silently fixes errors. The only defaults it
fills in are the ones the UI promises (empty description, income payment
method).
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from src.config import get_settings
from src.models.finance import (
    BillDraft,
    MonthlyExpenseDraft,
    PaymentMethod,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from src.utils.dates import parse_date, parse_month_key


CENT = Decimal("0.01")


class FormInputValidator:
    """
    Parses and validates raw form input.

    Each `validate_*` method returns (ValidationResult, draft-or-None). The
    draft is only built when there are no error-level issues.
    """

    def __init__(self):
        self._settings = get_settings().app

    # -------------------------------------------------------------------------
    # Field parsers
    # -------------------------------------------------------------------------

    def parse_amount(
        self,
        raw: Optional[str],
        issues: list[ValidationIssue],
        field: str = "amount",
    ) -> Optional[Decimal]:
        """
        Parse a money amount typed by the user.

        Accepts "12.50" and "12,50". Rejects empty, non-numeric, non-finite
        and negative input.
        """
        text = (raw or "").strip().replace(" ", "")
        if not text:
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message="El importe es obligatorio",
                severity="error",
            ))
            return None

        if "," in text and "." not in text:
            text = text.replace(",", ".")

        try:
            amount = Decimal(text)
        except InvalidOperation:
            amount = None

        if amount is None or not amount.is_finite():
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"'{raw}' no es un importe válido",
                severity="error",
                suggested_fix="Usa solo números, por ejemplo 125.50",
            ))
            return None

        if amount < 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message="El importe no puede ser negativo",
                severity="error",
                suggested_fix="Registra salidas como gasto, no con importe negativo",
            ))
            return None

        try:
            amount = amount.quantize(CENT)
        except InvalidOperation:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"El importe ({raw}) es demasiado grande",
                severity="error",
            ))
            return None

        if amount == 0:
            issues.append(ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message="El importe es cero",
                severity="warning",
            ))
        elif amount > Decimal(str(self._settings.max_amount)):
            issues.append(ValidationIssue(
                field=field,
                issue_type="suspicious_value",
                message=f"El importe ({amount}) parece demasiado alto",
                severity="warning",
                suggested_fix="Verifica que el importe sea correcto",
            ))

        return amount

    @staticmethod
    def parse_date_field(
        raw: Optional[str],
        issues: list[ValidationIssue],
        field: str,
    ) -> Optional[date]:
        text = (raw or "").strip()
        if not text:
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message="La fecha es obligatoria",
                severity="error",
            ))
            return None
        try:
            return parse_date(text)
        except ValueError:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"'{raw}' no es una fecha válida (AAAA-MM-DD)",
                severity="error",
            ))
            return None

    @staticmethod
    def parse_month_field(raw: Optional[str], issues: list[ValidationIssue]) -> Optional[str]:
        text = (raw or "").strip()
        try:
            parse_month_key(text)
        except ValueError:
            issues.append(ValidationIssue(
                field="month",
                issue_type="invalid_format",
                message=f"'{raw}' no es un mes válido (AAAA-MM)",
                severity="error",
            ))
            return None
        return text

    @staticmethod
    def _require_text(
        raw: Optional[str],
        issues: list[ValidationIssue],
        field: str,
        label: str,
    ) -> Optional[str]:
        text = (raw or "").strip()
        if not text:
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} es obligatorio",
                severity="error",
            ))
            return None
        return text

    @staticmethod
    def check_length(
        text: Optional[str],
        issues: list[ValidationIssue],
        field: str,
        limit: int,
    ) -> None:
        if text is not None and len(text) > limit:
            issues.append(ValidationIssue(
                field=field,
                issue_type="too_long",
                message=f"Máximo {limit} caracteres ({len(text)} escritos)",
                severity="error",
            ))

    # -------------------------------------------------------------------------
    # Forms
    # -------------------------------------------------------------------------

    def validate_transaction(
        self,
        date: Optional[str],
        transaction_type: Optional[str],
        amount: Optional[str],
        description: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> tuple[ValidationResult, Optional[TransactionDraft]]:
        """
        Validate the day modal form.

        Incomes default to card payment; expenses never carry a payment method.
        """
        issues: list[ValidationIssue] = []

        self.parse_date_field(date, issues, field="date")

        try:
            kind = TransactionType((transaction_type or "").strip().lower())
        except ValueError:
            kind = None
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message="El tipo debe ser 'income' o 'expense'",
                severity="error",
            ))

        method = None
        if kind == TransactionType.INCOME:
            try:
                method = PaymentMethod((payment_method or PaymentMethod.CARD.value).strip().lower())
            except ValueError:
                issues.append(ValidationIssue(
                    field="payment_method",
                    issue_type="invalid_value",
                    message="La forma de pago debe ser 'card' o 'cash'",
                    severity="error",
                ))

        parsed_amount = self.parse_amount(amount, issues)

        text = (description or "").strip() or self._settings.default_description
        self.check_length(text, issues, "description", 200)

        result = ValidationResult(form="transaction", issues=issues)
        if result.has_errors:
            return result, None

        return result, TransactionDraft(
            description=text,
            amount=parsed_amount,
            type=kind,
            payment_method=method,
        )

    def validate_monthly_expense(
        self,
        month: Optional[str],
        amount: Optional[str],
        description: Optional[str],
        form: str = "fixed_expense",
    ) -> tuple[ValidationResult, Optional[MonthlyExpenseDraft]]:
        """Validate a fixed expense, variable expense or tax form."""
        issues: list[ValidationIssue] = []

        self.parse_month_field(month, issues)
        text = self._require_text(description, issues, "description", "La descripción")
        self.check_length(text, issues, "description", 200)
        parsed_amount = self.parse_amount(amount, issues)

        result = ValidationResult(form=form, issues=issues)
        if result.has_errors:
            return result, None

        return result, MonthlyExpenseDraft(description=text, amount=parsed_amount)

    def validate_bill(
        self,
        creditor: Optional[str],
        amount: Optional[str],
        due_date: Optional[str],
        description: Optional[str] = None,
    ) -> tuple[ValidationResult, Optional[BillDraft]]:
        """Validate the bill form: creditor, amount and due date are required."""
        issues: list[ValidationIssue] = []

        name = self._require_text(creditor, issues, "creditor", "El acreedor")
        self.check_length(name, issues, "creditor", 200)
        parsed_amount = self.parse_amount(amount, issues)
        parsed_due = self.parse_date_field(due_date, issues, field="due_date")

        text = (description or "").strip() or self._settings.default_description
        self.check_length(text, issues, "description", 500)

        result = ValidationResult(form="bill", issues=issues)
        if result.has_errors:
            return result, None

        return result, BillDraft(
            creditor=name,
            amount=parsed_amount,
            due_date=parsed_due,
            description=text,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show under the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ Guardado correctamente."

        lines = []

        if result.has_errors:
            lines.append("❌ Corrige los siguientes campos:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Revisa lo siguiente:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
