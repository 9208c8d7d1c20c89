from __future__ import annotations

from dataclasses import dataclass

MIN_QUANTITY = 1
MAX_QUANTITY = 99


@dataclass(frozen=True)
class ValidationIssue:
    code: str | None
    field: str
    reason: str


class CartValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.issues:
            return "Validation failed"
        issue = self.issues[0]
        location = f"line {issue.code}" if issue.code is not None else "cart"
        return f"{location} {issue.field}: {issue.reason}"


def _raise_issue(code: str | None, field: str, reason: str) -> None:
    raise CartValidationError([ValidationIssue(code=code, field=field, reason=reason)])


def parse_quantity(value: int | str | None, code: str | None = None) -> int:
    """Turn prompt-style input into a quantity, rejecting anything outside 1..99."""
    if isinstance(value, bool) or value is None:
        _raise_issue(code, "quantity", f"quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY}")
    if isinstance(value, str):
        text = value.strip()
        try:
            value = int(text, 10)
        except ValueError:
            _raise_issue(code, "quantity", f"quantity must be a whole number, got {text!r}")
    if not isinstance(value, int):
        _raise_issue(code, "quantity", "quantity must be a whole number")
    validate_quantity(value, code)
    return value


def validate_quantity(quantity: int, code: str | None = None) -> None:
    if quantity < MIN_QUANTITY or quantity > MAX_QUANTITY:
        _raise_issue(code, "quantity", f"quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY}")
