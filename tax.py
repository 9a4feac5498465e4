"""
UK savings interest tax calculation.

Pure functions over a tax band and lists of accounts. Nothing here
caches results: every summary is recomputed from its source accounts.
Interest sums are vectorised with numpy; scalar inputs work too.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

import config as cfg
from accounts import Account, IsaAccount


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class TaxCalculation:
    """Tax breakdown for the taxable (non-ISA) accounts."""

    gross_interest: float
    taxable_interest: float
    tax_owed: float
    net_interest: float
    effective_rate: float    # percent of gross interest


@dataclass(frozen=True)
class SavingsSummary:
    """Combined view of taxable and ISA interest for one band."""

    band: str
    allowance: float
    tax_rate: float
    calculation: TaxCalculation
    isa_interest: float
    total_gross_interest: float
    total_net_interest: float
    overall_effective_rate: float    # percent of combined gross interest


# ─── Band lookups ────────────────────────────────────────────────────

def _band(band: str) -> tuple[float, float]:
    try:
        return cfg.TAX_BANDS[band]
    except KeyError:
        raise ValueError(
            f"Tax band must be one of {', '.join(cfg.TAX_BANDS)}, got {band!r}"
        ) from None


def savings_allowance(band: str) -> float:
    """Personal Savings Allowance for *band*."""
    return float(_band(band)[0])


def tax_rate(band: str) -> float:
    """Rate applied to interest above the allowance, as a decimal."""
    return _band(band)[1]


def validate_band(band: str) -> str:
    """Return *band* unchanged, raising ValueError if it is unknown."""
    _band(band)
    return band


def band_label(band: str) -> str:
    validate_band(band)
    return cfg.BAND_LABELS[band]


# ─── Interest ────────────────────────────────────────────────────────

def annual_interest(amounts: np.ndarray, rates: np.ndarray) -> np.ndarray:
    """Flat annual interest for each balance.

    Parameters
    ----------
    amounts : array_like
        Account balances in GBP.
    rates : array_like
        Annual interest rates in percent.

    Returns
    -------
    np.ndarray
        ``amount * rate / 100`` for each pair.
    """
    amounts = np.asarray(amounts, dtype=float)
    rates = np.asarray(rates, dtype=float)
    return amounts * rates / 100


def account_interest(account: Account) -> float:
    """Annual interest earned by a single account."""
    return float(annual_interest(account.amount, account.interest_rate))


def _total_interest(accounts: Iterable[Account]) -> float:
    accounts = list(accounts)
    if not accounts:
        return 0.0
    amounts = [a.amount for a in accounts]
    rates = [a.interest_rate for a in accounts]
    return float(np.sum(annual_interest(amounts, rates)))


# ─── Tax ─────────────────────────────────────────────────────────────

def calculate_tax(band: str, accounts: Sequence[Account]) -> TaxCalculation:
    """Tax owed on interest from taxable accounts.

    Interest up to the band's allowance is tax-free; the rest is taxed
    at the band's rate.

    Parameters
    ----------
    band : str
        ``'basic'``, ``'higher'`` or ``'additional'``.
    accounts : sequence of Account
        Taxable accounts. ISAs must not be passed here.

    Returns
    -------
    TaxCalculation
    """
    allowance = savings_allowance(band)
    rate = tax_rate(band)

    gross = _total_interest(accounts)
    taxable = max(0.0, gross - allowance)
    owed = taxable * rate
    effective = owed / gross * 100 if gross > 0 else 0.0

    return TaxCalculation(
        gross_interest=gross,
        taxable_interest=taxable,
        tax_owed=owed,
        net_interest=gross - owed,
        effective_rate=effective,
    )


def isa_interest(isa_accounts: Sequence[IsaAccount]) -> float:
    """Total ISA interest. Always tax-free, whatever the ISA type."""
    return _total_interest(isa_accounts)


def overall_effective_rate(tax_owed: float, total_gross: float) -> float:
    """Tax owed as a percentage of all interest, 0 when there is none."""
    return tax_owed / total_gross * 100 if total_gross > 0 else 0.0


def summarise(
    band: str,
    accounts: Sequence[Account],
    isa_accounts: Sequence[IsaAccount],
) -> SavingsSummary:
    """Full summary for one set of accounts, used for live and saved scenarios."""
    calc = calculate_tax(band, accounts)
    isa = isa_interest(isa_accounts)
    total_gross = calc.gross_interest + isa

    return SavingsSummary(
        band=band,
        allowance=savings_allowance(band),
        tax_rate=tax_rate(band),
        calculation=calc,
        isa_interest=isa,
        total_gross_interest=total_gross,
        total_net_interest=calc.net_interest + isa,
        overall_effective_rate=overall_effective_rate(calc.tax_owed, total_gross),
    )
