from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from ..ledger.model import UNIT


class EntryValidationError(ValueError):
    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


def validate_entry_input(raw: Union[str, int, float], unit: int = UNIT) -> int:
    """Parse user input into an entry value, or raise EntryValidationError.

    Accepts decimal text ("2000", "-1000", "3e3") or a number. The result must
    be finite and a whole multiple of `unit`; zero passes.
    """
    if isinstance(raw, bool):
        raise EntryValidationError("not_a_number", "Enter a valid number")
    text = str(raw).strip()
    try:
        val = Decimal(text)
    except InvalidOperation:
        raise EntryValidationError("not_a_number", "Enter a valid number") from None
    if not val.is_finite():
        raise EntryValidationError("not_a_number", "Enter a valid number")
    if val != val.to_integral_value() or int(val) % unit != 0:
        raise EntryValidationError(
            "not_unit_multiple",
            f"Values must be entered in steps of {unit} (e.g. {unit}, {2 * unit}, -{unit})",
        )
    return int(val)
