"""Tests for the savings tax engine."""

import math

import pytest

import tax


class TestBandTable:
    """Tests for the Personal Savings Allowance table."""

    @pytest.mark.parametrize(
        ("band", "allowance", "rate"),
        [
            ("basic", 1000, 0.20),
            ("higher", 500, 0.40),
            ("additional", 0, 0.45),
        ],
    )
    def test_allowance_and_rate(self, band: str, allowance: float, rate: float) -> None:
        assert tax.savings_allowance(band) == allowance
        assert tax.tax_rate(band) == rate

    def test_band_labels(self) -> None:
        assert tax.band_label("basic") == "Basic Rate"
        assert tax.band_label("additional") == "Additional Rate"

    def test_unknown_band_raises(self) -> None:
        with pytest.raises(ValueError, match="Tax band"):
            tax.savings_allowance("starter")
        with pytest.raises(ValueError):
            tax.calculate_tax("scottish", [])


class TestAnnualInterest:
    """Tests for simple annual interest."""

    def test_vectorised(self) -> None:
        result = tax.annual_interest([10_000, 2_000], [5, 2.5])
        assert list(result) == pytest.approx([500.0, 50.0])

    def test_account_interest(self, make_account) -> None:
        assert tax.account_interest(make_account(12_345.67, 4.1)) == pytest.approx(506.17247)


class TestCalculateTax:
    """Tests for calculate_tax."""

    def test_under_allowance(self, make_account) -> None:
        calc = tax.calculate_tax("basic", [make_account(10_000, 5)])
        assert calc.gross_interest == pytest.approx(500)
        assert calc.taxable_interest == 0
        assert calc.tax_owed == 0
        assert calc.net_interest == pytest.approx(500)
        assert calc.effective_rate == 0

    def test_basic_rate_over_allowance(self, make_account) -> None:
        calc = tax.calculate_tax("basic", [make_account(50_000, 5)])
        assert calc.gross_interest == pytest.approx(2500)
        assert calc.taxable_interest == pytest.approx(1500)
        assert calc.tax_owed == pytest.approx(300)
        assert calc.net_interest == pytest.approx(2200)
        assert calc.effective_rate == pytest.approx(12)

    def test_additional_rate_no_allowance(self, make_account) -> None:
        calc = tax.calculate_tax("additional", [make_account(50_000, 5)])
        assert calc.gross_interest == pytest.approx(2500)
        assert calc.taxable_interest == pytest.approx(2500)
        assert calc.tax_owed == pytest.approx(1125)
        assert calc.net_interest == pytest.approx(1375)
        assert calc.effective_rate == pytest.approx(45)

    def test_no_accounts(self) -> None:
        calc = tax.calculate_tax("basic", [])
        assert calc == tax.TaxCalculation(0.0, 0.0, 0.0, 0.0, 0.0)
        assert not math.isnan(calc.effective_rate)

    def test_higher_rate_multiple_accounts(self, make_account) -> None:
        accounts = [make_account(20_000, 4), make_account(15_000, 3, name="Fixed Bond")]
        calc = tax.calculate_tax("higher", accounts)
        # 800 + 450 = 1250 gross, 750 above the £500 allowance at 40%
        assert calc.gross_interest == pytest.approx(1250)
        assert calc.taxable_interest == pytest.approx(750)
        assert calc.tax_owed == pytest.approx(300)
        assert calc.net_interest == pytest.approx(950)

    @pytest.mark.parametrize("band", ["basic", "higher", "additional"])
    @pytest.mark.parametrize("amount", [0, 1, 999, 9_999, 25_000, 1_000_000])
    def test_taxable_interest_never_negative(self, make_account, band: str, amount: float) -> None:
        calc = tax.calculate_tax(band, [make_account(amount, 3.5)])
        assert calc.taxable_interest >= 0
        assert calc.tax_owed >= 0
        assert calc.net_interest <= calc.gross_interest

    def test_pure(self, make_account) -> None:
        accounts = [make_account(42_000, 4.75)]
        assert tax.calculate_tax("higher", accounts) == tax.calculate_tax("higher", accounts)

    def test_zero_rate_account(self, make_account) -> None:
        calc = tax.calculate_tax("additional", [make_account(100_000, 0)])
        assert calc.gross_interest == 0
        assert calc.effective_rate == 0


class TestIsaInterest:
    """Tests for tax-free ISA interest."""

    def test_sum(self, make_isa) -> None:
        isas = [make_isa(20_000, 5), make_isa(10_000, 8, isa_type="stocks")]
        assert tax.isa_interest(isas) == pytest.approx(1800)

    def test_empty(self) -> None:
        assert tax.isa_interest([]) == 0

    @pytest.mark.parametrize("band", ["basic", "higher", "additional"])
    @pytest.mark.parametrize("isa_type", ["cash", "stocks"])
    def test_isa_never_taxed(self, make_account, make_isa, band: str, isa_type: str) -> None:
        accounts = [make_account(30_000, 4)]
        without = tax.summarise(band, accounts, [])
        with_isa = tax.summarise(band, accounts, [make_isa(500_000, 6, isa_type=isa_type)])
        assert with_isa.calculation == without.calculation
        assert with_isa.calculation.tax_owed == without.calculation.tax_owed


class TestSummarise:
    """Tests for the combined savings summary."""

    def test_combined_totals(self, make_account, make_isa) -> None:
        summary = tax.summarise("basic", [make_account(50_000, 5)], [make_isa(20_000, 5)])
        assert summary.allowance == 1000
        assert summary.tax_rate == 0.20
        assert summary.isa_interest == pytest.approx(1000)
        assert summary.total_gross_interest == pytest.approx(3500)
        assert summary.total_net_interest == pytest.approx(3200)
        assert summary.overall_effective_rate == pytest.approx(300 / 3500 * 100)

    def test_only_isas(self, make_isa) -> None:
        summary = tax.summarise("additional", [], [make_isa(20_000, 5)])
        assert summary.calculation.tax_owed == 0
        assert summary.total_net_interest == pytest.approx(1000)
        assert summary.overall_effective_rate == 0

    def test_nothing_at_all_is_guarded(self) -> None:
        summary = tax.summarise("higher", [], [])
        assert summary.overall_effective_rate == 0
        assert not math.isnan(summary.overall_effective_rate)

    def test_isa_type_does_not_matter(self, make_isa) -> None:
        cash = tax.summarise("basic", [], [make_isa(10_000, 5, isa_type="cash")])
        stocks = tax.summarise("basic", [], [make_isa(10_000, 5, isa_type="stocks")])
        assert cash.total_net_interest == stocks.total_net_interest

    def test_overall_effective_rate(self) -> None:
        assert tax.overall_effective_rate(300, 2500) == pytest.approx(12)
        assert tax.overall_effective_rate(0, 0) == 0
