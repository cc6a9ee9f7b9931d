"""
Billing engine.

Computes subtotal, discount, per-tax breakdown and final amount for a set of
bill lines. Amounts stay at full Decimal precision; round_money and
format_currency are the only places that round, and callers use them at
display time.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from order_rules.schemas.billing import (
    BillCalculation,
    BillLineBreakdown,
    BillLineItem,
    TaxLine,
    TaxRule,
    TaxSetting,
)
from shared.config.settings import settings

HUNDRED = Decimal("100")
CENT = Decimal("0.01")
ZERO = Decimal("0")


def round_money(amount: Decimal) -> Decimal:
    """Round to two decimal places, halves away from zero."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, symbol: str | None = None) -> str:
    """
    Format an amount for guests and receipts.

    Example:
        format_currency(Decimal("1234.5")) -> "₹1,234.50"
    """
    if symbol is None:
        symbol = settings.currency_symbol
    rounded = round_money(amount)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.2f}"


def active_tax_rules(tax_settings: Iterable[TaxSetting]) -> list[TaxRule]:
    """Active settings in display order, as plain rules."""
    active = [t for t in tax_settings if t.is_active]
    active.sort(key=lambda t: t.display_order)
    return [TaxRule(name=t.name, rate=t.rate) for t in active]


def effective_discount_percentage(
    items: Sequence[BillLineItem],
    offer_discount: Decimal = ZERO,
    discount_percentage: Decimal = ZERO,
) -> Decimal:
    """
    Express a flat offer discount as a percentage of the items total.

    A flat offer discount takes precedence over a manual percentage. Returns
    the manual percentage unchanged when there is no offer discount.
    """
    if offer_discount <= 0:
        return discount_percentage

    total = sum((item.total_price for item in items), ZERO)
    if total <= 0:
        return ZERO
    return min(offer_discount / total * HUNDRED, HUNDRED)


def calculate_bill(
    items: Sequence[BillLineItem],
    discount_percentage: Decimal,
    tax_rules: Sequence[TaxRule],
    tax_inclusive: bool = False,
) -> BillCalculation:
    """
    Compute every bill figure from line items, a discount and tax rules.

    Exclusive mode: the discount comes off the subtotal and each tax is
    charged on what remains.

    Inclusive mode: line prices already contain tax. The pre-tax value is
    backed out with the combined rate, the discount comes off that value and
    the taxes are recomputed on the discounted base, so the final amount is
    the subtotal less the same percentage.

    Args:
        items: Bill lines; total_price is used as given
        discount_percentage: 0-100, validated by the caller
        tax_rules: Taxes to apply, in display order
        tax_inclusive: Whether line prices already include tax

    Returns:
        BillCalculation at full precision. Empty items or no tax rules give
        the all-zero calculation.
    """
    if not items or not tax_rules:
        return BillCalculation.zero(tax_inclusive=tax_inclusive)

    pct = Decimal(discount_percentage)
    subtotal = sum((item.total_price for item in items), ZERO)
    combined_rate = sum((rule.rate for rule in tax_rules), ZERO)

    def pre_tax(amount: Decimal) -> Decimal:
        if not tax_inclusive:
            return amount
        return amount * HUNDRED / (HUNDRED + combined_rate)

    net_subtotal = pre_tax(subtotal)
    discount_amount = net_subtotal * pct / HUNDRED
    taxable_base = net_subtotal - discount_amount

    taxes = [
        TaxLine(name=rule.name, rate=rule.rate, amount=taxable_base * rule.rate / HUNDRED)
        for rule in tax_rules
    ]
    total_tax = sum((tax.amount for tax in taxes), ZERO)

    lines = []
    for item in items:
        base_price = pre_tax(item.total_price)
        lines.append(
            BillLineBreakdown(
                name=item.name,
                quantity=item.quantity,
                is_manual=item.is_manual,
                base_price=base_price,
                item_taxes=[
                    TaxLine(name=rule.name, rate=rule.rate, amount=base_price * rule.rate / HUNDRED)
                    for rule in tax_rules
                ],
            )
        )

    return BillCalculation(
        subtotal=subtotal,
        net_subtotal=net_subtotal,
        discount_amount=discount_amount,
        taxable_base=taxable_base,
        taxes=taxes,
        total_tax=total_tax,
        final_amount=taxable_base + total_tax,
        tax_inclusive=tax_inclusive,
        lines=lines,
    )
