"""
Unit tests for the German tax estimate.

Covers the shared allowance, the crypto Freigrenze cliff, the futures loss
cap with carry-forward and the solidarity/church surcharges.
"""

from decimal import Decimal

import pytest

from portfolio_ledger.futures import FuturesYear
from portfolio_ledger.models import CryptoGainPolicy, FilingStatus, TaxRules, TaxSettings
from portfolio_ledger.tax import (
    AllowancePool,
    estimate_year_tax,
    surcharges,
    tax_capital_income,
    tax_crypto_year,
    tax_futures,
)


class TestAllowancePool:
    def test_consume_partially(self):
        taken, pool = AllowancePool(total=Decimal("1000")).consume(Decimal("600"))
        assert taken == Decimal("600")
        assert pool.remaining == Decimal("400")

    def test_consume_more_than_remaining(self):
        taken, pool = AllowancePool(total=Decimal("1000"), used=Decimal("600")).consume(Decimal("900"))
        assert taken == Decimal("400")
        assert pool.remaining == Decimal("0")

    def test_negative_amount_takes_nothing(self):
        original = AllowancePool(total=Decimal("1000"))
        taken, pool = original.consume(Decimal("-50"))
        assert taken == Decimal("0")
        assert pool == original


class TestSurcharges:
    def test_soli_only(self):
        soli, church, total = surcharges(Decimal("125"), Decimal("0"))
        assert soli == Decimal("6.88")
        assert church == Decimal("0.00")
        assert total == Decimal("131.88")

    def test_with_church_tax(self):
        soli, church, total = surcharges(Decimal("125"), Decimal("0.09"))
        assert church == Decimal("11.25")
        assert total == Decimal("143.13")


class TestCapitalIncome:
    """Flat-rate tax after the Sparer-Pauschbetrag."""

    def test_income_above_allowance(self, single_settings):
        """€1,500 capital income, single: €500 taxable, €125 tax, €6.88 soli."""
        result, pool = tax_capital_income(Decimal("1500"), AllowancePool(total=Decimal("1000")), single_settings)

        assert result.allowance_used == Decimal("1000")
        assert result.taxable == Decimal("500.00")
        assert result.base_tax == Decimal("125.00")
        assert result.soli == Decimal("6.88")
        assert result.total == Decimal("131.88")
        assert pool.remaining == Decimal("0")

    def test_income_below_allowance(self, single_settings):
        result, pool = tax_capital_income(Decimal("400"), AllowancePool(total=Decimal("1000")), single_settings)

        assert result.allowance_used == Decimal("400.00")
        assert result.total == Decimal("0")
        assert pool.remaining == Decimal("600.00")

    def test_net_loss_is_not_taxed(self, single_settings):
        result, pool = tax_capital_income(Decimal("-300"), AllowancePool(total=Decimal("1000")), single_settings)

        assert result.capital_income == Decimal("0")
        assert result.total == Decimal("0")
        assert pool.remaining == Decimal("1000")


class TestCrypto:
    """Short-term crypto gains with the €600 Freigrenze."""

    def test_at_threshold_is_exempt(self, single_settings):
        result = tax_crypto_year(Decimal("600.00"), single_settings)

        assert result.exempt
        assert result.total == Decimal("0")

    def test_one_cent_above_is_fully_taxable(self, single_settings):
        """The whole amount is taxed, not just the excess over €600."""
        result = tax_crypto_year(Decimal("600.01"), single_settings)

        assert not result.exempt
        assert result.taxable == Decimal("600.01")
        assert result.base_tax == Decimal("252.00")
        assert result.soli == Decimal("13.86")
        assert result.total == Decimal("265.86")

    def test_losses_ignored_by_default(self, single_settings):
        result = tax_crypto_year(Decimal("800"), single_settings, short_term_losses=Decimal("-250"))

        assert result.short_term_gains == Decimal("800.00")
        assert not result.exempt

    def test_losses_net_under_net_losses_policy(self):
        settings = TaxSettings(crypto_gain_policy=CryptoGainPolicy.NET_LOSSES)
        result = tax_crypto_year(Decimal("800"), settings, short_term_losses=Decimal("-250"))

        assert result.short_term_gains == Decimal("550.00")
        assert result.exempt

    def test_custom_threshold(self, single_settings):
        rules = TaxRules(crypto_threshold=Decimal("1000"))
        assert tax_crypto_year(Decimal("800"), single_settings, rules=rules).exempt


class TestFutures:
    """Futures losses: capped offset, remainder carried forward."""

    def test_loss_cap_and_carry_forward(self, single_settings):
        futures = FuturesYear(year=2024, gains=Decimal("30000"), losses=Decimal("25000"))
        result, pool = tax_futures(futures, AllowancePool(total=Decimal("1000")), single_settings)

        assert result.loss_cap == Decimal("20000")
        assert result.deductible_losses == Decimal("20000")
        assert result.carried_forward_losses == Decimal("5000.00")
        assert result.allowance_used == Decimal("1000")
        assert result.taxable_base == Decimal("9000.00")
        assert result.base_tax == Decimal("2250.00")
        assert result.soli == Decimal("123.75")
        assert pool.remaining == Decimal("0")

    def test_married_cap(self):
        settings = TaxSettings(filing_status=FilingStatus.MARRIED)
        futures = FuturesYear(year=2024, gains=Decimal("50000"), losses=Decimal("45000"))
        result, _ = tax_futures(futures, AllowancePool(total=Decimal("2000")), settings)

        assert result.deductible_losses == Decimal("40000")
        assert result.carried_forward_losses == Decimal("5000.00")

    def test_losses_larger_than_gains(self, single_settings):
        futures = FuturesYear(year=2024, gains=Decimal("5000"), losses=Decimal("8000"))
        result, pool = tax_futures(futures, AllowancePool(total=Decimal("1000")), single_settings)

        assert result.deductible_losses == Decimal("5000.00")
        assert result.carried_forward_losses == Decimal("3000.00")
        assert result.total == Decimal("0")
        assert pool.remaining == Decimal("1000")

    def test_prior_carry_forward_is_used(self, single_settings):
        futures = FuturesYear(year=2024, gains=Decimal("10000"), prior_carry_forward=Decimal("4000"))
        result, _ = tax_futures(futures, AllowancePool(total=Decimal("0")), single_settings)

        assert result.deductible_losses == Decimal("4000.00")
        assert result.carried_forward_losses == Decimal("0.00")
        assert result.taxable_base == Decimal("6000.00")
        assert result.base_tax == Decimal("1500.00")


class TestEstimateYearTax:
    """All three buckets together."""

    def test_shared_allowance_example(self, single_settings):
        summary = estimate_year_tax(2024, Decimal("1500"), Decimal("0"), single_settings)

        assert summary.allowance == Decimal("1000")
        assert summary.capital.taxable == Decimal("500.00")
        assert summary.capital.base_tax == Decimal("125.00")
        assert summary.capital.soli == Decimal("6.88")
        assert summary.allowance_remaining == Decimal("0")
        assert summary.grand_total == Decimal("131.88")

    def test_capital_income_draws_allowance_first(self, single_settings):
        futures = FuturesYear(year=2024, gains=Decimal("1000"))
        summary = estimate_year_tax(2024, Decimal("600"), Decimal("0"), single_settings, futures=futures)

        assert summary.capital.allowance_used == Decimal("600.00")
        assert summary.futures.allowance_used == Decimal("400.00")
        assert summary.futures.taxable_base == Decimal("600.00")
        assert summary.allowance_remaining == Decimal("0")

    @pytest.mark.parametrize(
        "capital,futures_gains",
        [("0", "0"), ("250", "300"), ("999.99", "0.02"), ("5000", "5000"), ("-200", "700")],
    )
    def test_allowance_never_spent_twice(self, single_settings, capital, futures_gains):
        futures = FuturesYear(year=2024, gains=Decimal(futures_gains))
        summary = estimate_year_tax(2024, Decimal(capital), Decimal("0"), single_settings, futures=futures)

        used = summary.capital.allowance_used + summary.futures.allowance_used
        assert used <= summary.allowance
        assert used + summary.allowance_remaining == summary.allowance

    def test_buckets_do_not_offset(self, single_settings):
        """Crypto gains are taxed even when capital income is negative."""
        summary = estimate_year_tax(2024, Decimal("-5000"), Decimal("1000"), single_settings)

        assert summary.capital.total == Decimal("0")
        assert summary.crypto.total > 0
        assert summary.grand_total == summary.crypto.total

    def test_married_allowance(self):
        summary = estimate_year_tax(2024, Decimal("1800"), Decimal("0"), TaxSettings(filing_status="married"))
        assert summary.allowance == Decimal("2000")
        assert summary.grand_total == Decimal("0")

    def test_no_futures_gives_empty_bucket(self, single_settings):
        summary = estimate_year_tax(2024, Decimal("0"), Decimal("0"), single_settings)
        assert summary.futures.total == Decimal("0")
        assert summary.futures.carried_forward_losses == Decimal("0")
