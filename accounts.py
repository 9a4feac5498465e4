"""
Savings account records and boundary parsing of user-entered text.

Amounts and rates arrive from the CLI prompts and the web form as free
text. Everything here turns that text into validated ``Account`` and
``IsaAccount`` records, or refuses it by returning ``None``.
"""

from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass, field
from typing import Optional

import config as cfg


_NUMBER_RE = re.compile(r"\d+(\.\d*)?|\.\d+")


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


# ─── Records ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Account:
    """A taxable savings account paying flat annual interest."""

    name: str
    amount: float            # balance in GBP
    interest_rate: float     # annual rate in percent, e.g. 4.5
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Account name must not be blank")
        for label, value in (("amount", self.amount), ("interest rate", self.interest_rate)):
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"Account {label} must be a finite, non-negative number")


@dataclass(frozen=True)
class IsaAccount(Account):
    """An ISA wrapper. Interest is tax-free whatever the ISA type."""

    isa_type: str = cfg.DEFAULT_ISA_TYPE

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.isa_type not in cfg.ISA_TYPES:
            raise ValueError(f"ISA type must be one of {', '.join(cfg.ISA_TYPES)}")

    @property
    def type_label(self) -> str:
        return cfg.ISA_TYPES[self.isa_type]


# ─── Parsing ─────────────────────────────────────────────────────────

def clean_currency(text: str) -> str:
    """Remove currency symbols, commas, spaces."""
    return re.sub(r"[£,\s]", "", text)


def _parse_number(text: str) -> Optional[float]:
    if not _NUMBER_RE.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def parse_amount(text: str) -> Optional[float]:
    """Parse a currency amount such as ``"£12,500.50"``.

    Returns ``None`` for blank, non-numeric or negative input and for
    text with more than one decimal point.
    """
    return _parse_number(clean_currency(text or ""))


def parse_rate(text: str) -> Optional[float]:
    """Parse an interest rate in percent, with or without a trailing ``%``."""
    cleaned = (text or "").strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1].strip()
    return _parse_number(cleaned)


def _group_digits(digits: str) -> str:
    """Comma-group a string of digits, dropping leading zeros.

    Works on the string directly so arbitrarily long input is safe.
    """
    digits = digits.lstrip("0") or "0"
    head = len(digits) % 3 or 3
    groups = [digits[:head]] + [digits[i:i + 3] for i in range(head, len(digits), 3)]
    return ",".join(groups)


def format_currency_input(text: str, previous: str = "") -> str:
    """Format a currency field as the user types.

    Only digits and the decimal point are kept. The integer part is
    grouped with commas and any decimal part is kept as typed. An edit
    that introduces a second decimal point is rejected by returning
    *previous*, the last valid display string.
    """
    cleaned = re.sub(r"[^\d.]", "", text)
    parts = cleaned.split(".")
    if len(parts) > 2:
        return previous

    if parts[0]:
        integer_part = _group_digits(parts[0])
        decimal_part = f".{parts[1]}" if len(parts) == 2 else ""
        return f"{integer_part}{decimal_part}"

    return cleaned


def normalise_currency_display(text: str) -> str:
    """Tidy a formatted amount once editing is finished.

    ``"1,234.50"`` becomes ``"1,234.5"``; unparseable text is returned
    unchanged.
    """
    value = parse_amount(text)
    if value is None:
        return text
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def make_account(name: str, amount_text: str, rate_text: str) -> Optional[Account]:
    """Build an ``Account`` from form text, or ``None`` if any field is invalid."""
    amount = parse_amount(amount_text)
    rate = parse_rate(rate_text)
    if not (name or "").strip() or amount is None or rate is None:
        return None
    return Account(name=name.strip(), amount=amount, interest_rate=rate)


def make_isa(
    name: str,
    amount_text: str,
    rate_text: str,
    isa_type: str = cfg.DEFAULT_ISA_TYPE,
) -> Optional[IsaAccount]:
    """Build an ``IsaAccount`` from form text, or ``None`` if any field is invalid."""
    amount = parse_amount(amount_text)
    rate = parse_rate(rate_text)
    if (
        not (name or "").strip()
        or amount is None
        or rate is None
        or isa_type not in cfg.ISA_TYPES
    ):
        return None
    return IsaAccount(name=name.strip(), amount=amount, interest_rate=rate, isa_type=isa_type)
