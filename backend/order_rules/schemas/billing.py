"""
Billing schemas.

All amounts are Decimal and kept at full precision. Rounding to two places
happens only through BillCalculation.rounded() or the currency formatter.
"""

from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class BillLineItem(BaseModel):
    """Bill line. total_price is trusted as unit_price x quantity."""
    model_config = ConfigDict(frozen=True)

    name: str
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0)
    is_manual: bool = False
    order_id: str | None = None


class TaxRule(BaseModel):
    """A tax applied to the bill, e.g. CGST at 2.5%."""
    model_config = ConfigDict(frozen=True)

    name: str
    rate: Decimal = Field(ge=0)


class TaxSetting(TaxRule):
    """Tax row as configured by the restaurant."""
    is_active: bool = True
    display_order: int = 0
    applies_to: str | None = None


class TaxLine(BaseModel):
    name: str
    rate: Decimal
    amount: Decimal


class BillLineBreakdown(BaseModel):
    """Per-line tax breakdown before discount, as printed on receipts."""
    name: str
    quantity: int
    is_manual: bool = False
    # Pre-tax value of the line
    base_price: Decimal
    item_taxes: List[TaxLine]


class BillCalculation(BaseModel):
    """Every figure a receipt needs, derived from one set of inputs."""
    subtotal: Decimal = Decimal("0")
    net_subtotal: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    taxable_base: Decimal = Decimal("0")
    taxes: List[TaxLine] = []
    total_tax: Decimal = Decimal("0")
    final_amount: Decimal = Decimal("0")
    tax_inclusive: bool = False
    lines: List[BillLineBreakdown] = []

    @classmethod
    def zero(cls, tax_inclusive: bool = False) -> "BillCalculation":
        """The "nothing to bill" result."""
        return cls(tax_inclusive=tax_inclusive)

    def rounded(self) -> "BillCalculation":
        """Copy with every amount rounded to two places for display."""
        from order_rules.engines.billing import round_money

        return BillCalculation(
            subtotal=round_money(self.subtotal),
            net_subtotal=round_money(self.net_subtotal),
            discount_amount=round_money(self.discount_amount),
            taxable_base=round_money(self.taxable_base),
            taxes=[
                TaxLine(name=t.name, rate=t.rate, amount=round_money(t.amount))
                for t in self.taxes
            ],
            total_tax=round_money(self.total_tax),
            final_amount=round_money(self.final_amount),
            tax_inclusive=self.tax_inclusive,
            lines=[
                BillLineBreakdown(
                    name=line.name,
                    quantity=line.quantity,
                    is_manual=line.is_manual,
                    base_price=round_money(line.base_price),
                    item_taxes=[
                        TaxLine(name=t.name, rate=t.rate, amount=round_money(t.amount))
                        for t in line.item_taxes
                    ],
                )
                for line in self.lines
            ],
        )
