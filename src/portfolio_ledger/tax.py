"""
German tax estimate for one year.

Three buckets that never offset each other:

- Capital income (dividends, interest, gains on stocks/bonds/ETFs): flat
  Abgeltungsteuer after the Sparer-Pauschbetrag.
- Short-term crypto gains: marginal income tax rate, with a Freigrenze
  (at or below the threshold everything is tax-free, above it everything is
  taxable).
- Futures/derivatives (§20 Abs. 6 EStG): losses only offset futures gains,
  capped per year; the rest is carried forward.

The allowance is one pool shared by capital income and futures. It is passed
explicitly from bucket to bucket: capital income consumes first, futures get
what is left.
"""

from dataclasses import dataclass
from decimal import Decimal

from .futures import FuturesYear
from .models import (
    GERMAN_TAX_RULES,
    CapitalTaxResult,
    CryptoGainPolicy,
    CryptoTaxResult,
    FuturesTaxResult,
    TaxRules,
    TaxSettings,
    YearTaxSummary,
)
from .money import CENT, ZERO, clamp_non_negative, dec, quantize


@dataclass(frozen=True)
class AllowancePool:
    """Annual allowance and how much of it has been spent so far."""

    total: Decimal
    used: Decimal = ZERO

    @property
    def remaining(self) -> Decimal:
        return clamp_non_negative(self.total - self.used)

    def consume(self, amount: Decimal) -> tuple[Decimal, "AllowancePool"]:
        """Take up to `amount` from the pool. Returns (taken, new pool)."""
        wanted = clamp_non_negative(amount)
        taken = wanted if wanted < self.remaining else self.remaining
        return taken, AllowancePool(total=self.total, used=self.used + taken)


def surcharges(
    base_tax: Decimal, church_rate: Decimal, rules: TaxRules = GERMAN_TAX_RULES
) -> tuple[Decimal, Decimal, Decimal]:
    """
    Solidarity surcharge and church tax on a base tax.

    Returns (soli, church, total) with total = base_tax + soli + church.
    """
    base_tax = quantize(base_tax, CENT)
    soli = quantize(base_tax * rules.soli_rate, CENT)
    church = quantize(base_tax * clamp_non_negative(church_rate), CENT)
    return soli, church, base_tax + soli + church


def tax_capital_income(
    capital_income: Decimal,
    pool: AllowancePool,
    settings: TaxSettings,
    rules: TaxRules = GERMAN_TAX_RULES,
) -> tuple[CapitalTaxResult, AllowancePool]:
    """Flat-rate tax on the year's net capital income."""
    income = quantize(clamp_non_negative(dec(capital_income)), CENT)
    allowance_used, pool = pool.consume(income)
    taxable = income - allowance_used
    base_tax = quantize(taxable * rules.flat_rate, CENT)
    soli, church, total = surcharges(base_tax, settings.church_tax_rate, rules)

    result = CapitalTaxResult(
        capital_income=income,
        allowance_used=allowance_used,
        taxable=taxable,
        base_tax=base_tax,
        soli=soli,
        church=church,
        total=total,
    )
    return result, pool


def tax_crypto_year(
    short_term_gains: Decimal,
    settings: TaxSettings,
    short_term_losses: Decimal = ZERO,
    rules: TaxRules = GERMAN_TAX_RULES,
) -> CryptoTaxResult:
    """
    Income tax on short-term crypto gains.

    The threshold is a cliff: one cent above it makes the whole amount
    taxable, not just the excess. Losses only count under the NET_LOSSES
    policy.
    """
    amount = clamp_non_negative(dec(short_term_gains))
    if settings.crypto_gain_policy == CryptoGainPolicy.NET_LOSSES:
        amount = clamp_non_negative(amount - abs(dec(short_term_losses)))
    amount = quantize(amount, CENT)

    if amount <= rules.crypto_threshold:
        return CryptoTaxResult(
            short_term_gains=amount, threshold=rules.crypto_threshold, exempt=True
        )

    base_tax = quantize(amount * settings.crypto_marginal_rate, CENT)
    soli, church, total = surcharges(base_tax, settings.church_tax_rate, rules)
    return CryptoTaxResult(
        short_term_gains=amount,
        threshold=rules.crypto_threshold,
        exempt=False,
        taxable=amount,
        base_tax=base_tax,
        soli=soli,
        church=church,
        total=total,
    )


def tax_futures(
    futures: FuturesYear,
    pool: AllowancePool,
    settings: TaxSettings,
    rules: TaxRules = GERMAN_TAX_RULES,
) -> tuple[FuturesTaxResult, AllowancePool]:
    """
    Flat-rate tax on futures gains after the capped loss offset.

    Losses carried forward from earlier years join this year's losses and are
    subject to the same cap. Whatever cannot be deducted is carried forward.
    """
    gains = quantize(clamp_non_negative(futures.gains), CENT)
    losses = quantize(abs(futures.losses) + abs(futures.prior_carry_forward), CENT)
    loss_cap = rules.futures_loss_cap_for(settings.filing_status)

    deductible = min(losses, loss_cap, gains)
    carried_forward = losses - deductible
    profit_after_losses = gains - deductible

    allowance_used, pool = pool.consume(profit_after_losses)
    taxable_base = profit_after_losses - allowance_used
    base_tax = quantize(taxable_base * rules.flat_rate, CENT)
    soli, church, total = surcharges(base_tax, settings.church_tax_rate, rules)

    result = FuturesTaxResult(
        total_gains=gains,
        total_losses=losses,
        loss_cap=loss_cap,
        deductible_losses=deductible,
        carried_forward_losses=carried_forward,
        allowance_used=allowance_used,
        taxable_base=taxable_base,
        base_tax=base_tax,
        soli=soli,
        church=church,
        total=total,
    )
    return result, pool


def estimate_year_tax(
    year: int,
    capital_income: Decimal,
    short_term_crypto_gains: Decimal,
    settings: TaxSettings,
    short_term_crypto_losses: Decimal = ZERO,
    futures: FuturesYear | None = None,
    rules: TaxRules = GERMAN_TAX_RULES,
) -> YearTaxSummary:
    """Run all three buckets for one year. Capital income draws on the allowance first."""
    allowance = rules.allowance_for(settings.filing_status)
    pool = AllowancePool(total=allowance)

    capital, pool = tax_capital_income(capital_income, pool, settings, rules)
    crypto = tax_crypto_year(short_term_crypto_gains, settings, short_term_crypto_losses, rules)
    futures_result, pool = tax_futures(futures or FuturesYear(year=year), pool, settings, rules)

    return YearTaxSummary(
        year=year,
        capital=capital,
        crypto=crypto,
        futures=futures_result,
        allowance=allowance,
        allowance_remaining=pool.remaining,
    )
