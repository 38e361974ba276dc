from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal("0")


def quantize(amount: Decimal, precision: int = 2) -> Decimal:
    return Decimal(amount).quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


def tax_for(amount: Decimal, rate: Decimal, tax_flag: bool, precision: int = 2) -> Decimal:
    """Tax contained in (tax_flag=True) or owed on top of (False) `amount`."""
    if not rate:
        return quantize(ZERO, precision)
    if tax_flag:
        return quantize(amount * rate / (Decimal(100) + rate), precision)
    return quantize(amount * rate / Decimal(100), precision)


@dataclass
class Price:
    value: Decimal = ZERO
    costs: Decimal = ZERO
    rebate: Decimal = ZERO
    tax_rate: Decimal = ZERO
    tax_value: Decimal = ZERO
    tax_flag: bool = True
    tax_name: str = ""
    currency_id: str = "EUR"
    precision: int = 2

    @classmethod
    def for_line(
        cls,
        value,
        costs=ZERO,
        rebate=ZERO,
        tax_rate=ZERO,
        *,
        tax_flag: bool = True,
        tax_name: str = "",
        currency_id: str = "EUR",
        quantity: int = 1,
        precision: int = 2,
    ) -> "Price":
        qty = Decimal(quantity)
        value = quantize(Decimal(value or 0) * qty, precision)
        costs = quantize(Decimal(costs or 0) * qty, precision)
        rebate = quantize(Decimal(rebate or 0) * qty, precision)
        rate = Decimal(tax_rate or 0)
        return cls(
            value=value,
            costs=costs,
            rebate=rebate,
            tax_rate=rate,
            tax_value=tax_for(value + costs, rate, tax_flag, precision),
            tax_flag=tax_flag,
            tax_name=tax_name,
            currency_id=currency_id,
            precision=precision,
        )

    def empty(self) -> "Price":
        """Zero amounts, same rate/currency/flags."""
        return replace(self, value=ZERO, costs=ZERO, rebate=ZERO, tax_value=ZERO)

    def add(self, other: "Price") -> "Price":
        self.value += other.value
        self.costs += other.costs
        self.rebate += other.rebate
        self.tax_value += other.tax_value
        return self

    @property
    def total(self) -> Decimal:
        """Amount payable: gross prices already contain the tax."""
        if self.tax_flag:
            return self.value + self.costs
        return self.value + self.costs + self.tax_value
