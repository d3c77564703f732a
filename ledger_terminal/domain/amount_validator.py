"""
Amount Validator - Turns operator input into a validated amount.

Two checks are offered:

- ``is_keystroke_valid`` accepts partial input while it is being typed
  (``"12."`` is fine here), so the input surface can drop bad keystrokes.
- ``validate`` decides whether the text can be submitted and either returns
  a ``ValidatedAmount`` or an ``InvalidAmount`` carrying a stable reason.

Both accept ``,`` as the decimal separator and are pure.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Optional, Union

from ledger_terminal.configs import (
    MAX_FRACTION_DIGITS,
    REASON_AMOUNT_REQUIRED,
    REASON_MAX_DECIMALS,
    REASON_MUST_BE_POSITIVE,
    REASON_NOT_A_NUMBER,
)
from ledger_terminal.core.value_objects import InvalidAmount, ValidatedAmount


KEYSTROKE_PATTERN = re.compile(r"^\d*(?:[.,]\d*)?$", re.ASCII)
NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d+)?|\.\d+)$", re.ASCII)


def normalize_separator(text: str) -> str:
    """Replace ``,`` with ``.``."""
    return text.replace(",", ".")


def is_keystroke_valid(text: str) -> bool:
    """
    Check whether partially typed input may stay in the input field.

    Args:
        text: Current content of the field, possibly incomplete.

    Returns:
        True for ``digits* ([.,] digits*)?``, including the empty string.
    """
    return bool(KEYSTROKE_PATTERN.match(text))


def fraction_digits(value: Decimal) -> int:
    """Number of digits after the decimal point as written."""
    exponent = value.as_tuple().exponent
    if not isinstance(exponent, int) or exponent >= 0:
        return 0
    return -exponent


def validate(raw_input: Optional[str]) -> Union[ValidatedAmount, InvalidAmount]:
    """
    Validate an amount before submitting it.

    Args:
        raw_input: Free-form text typed by the operator.

    Returns:
        ValidatedAmount on success, otherwise InvalidAmount with one of
        ``"amount required"``, ``"not a number"``, ``"must be positive"``
        or ``"max 2 decimal places"``.
    """
    if raw_input is None or not raw_input.strip():
        return InvalidAmount(REASON_AMOUNT_REQUIRED)

    text = normalize_separator(raw_input.strip())
    if not NUMBER_PATTERN.match(text):
        return InvalidAmount(REASON_NOT_A_NUMBER)

    value = Decimal(text)
    if value <= 0:
        return InvalidAmount(REASON_MUST_BE_POSITIVE)

    if fraction_digits(value) > MAX_FRACTION_DIGITS:
        return InvalidAmount(REASON_MAX_DECIMALS)

    return ValidatedAmount(value)


class AmountBuffer:
    """
    Text being entered for an operation, fed by a text field or a digit pad.

    Every edit goes through the keystroke filter; rejected edits leave the
    buffer unchanged.
    """

    def __init__(self, value: str = "") -> None:
        self._value = ""
        self.set_text(value)

    @property
    def value(self) -> str:
        return self._value

    def set_text(self, text: str) -> bool:
        """Replace the whole content, as a text field does on change."""
        if not is_keystroke_valid(text):
            return False
        self._value = normalize_separator(text)
        return True

    def press_digit(self, digit: str) -> bool:
        """Append one digit from the pad."""
        if len(digit) != 1 or digit not in "0123456789":
            return False
        return self.set_text(self._value + digit)

    def press_decimal(self) -> bool:
        """Append the decimal point, once."""
        if "." in self._value:
            return False
        return self.set_text(self._value + "." if self._value else "0.")

    def backspace(self) -> None:
        self._value = self._value[:-1]

    def clear(self) -> None:
        self._value = ""

    def submit(self) -> Union[ValidatedAmount, InvalidAmount]:
        """Validate the current content."""
        return validate(self._value)
