"""
Billing Domain Service.

Reads the restaurant's tax configuration once per bill and runs the billing
engine on it.
"""

from decimal import Decimal, InvalidOperation
from typing import Sequence

from order_rules.engines.billing import (
    active_tax_rules,
    calculate_bill,
    effective_discount_percentage,
)
from order_rules.repositories.base import BillingRepository
from order_rules.schemas.billing import BillCalculation, BillLineItem, TaxRule
from shared.config.constants import SettingKeys
from shared.config.logging import billing_logger as logger
from shared.config.settings import settings
from shared.utils.exceptions import ValidationError
from shared.utils.validators import validate_percentage

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


class BillingService:
    """Domain service for bill calculation."""

    def __init__(self, repository: BillingRepository):
        self._repository = repository

    def is_tax_inclusive(self) -> bool:
        """Restaurant-wide tax mode; falls back to the configured default."""
        value = self._repository.fetch_setting(SettingKeys.TAX_INCLUSIVE)
        if value is None:
            return settings.default_tax_inclusive
        return str(value).strip().lower() in TRUE_VALUES

    def tax_rules(self) -> list[TaxRule]:
        return active_tax_rules(self._repository.fetch_tax_settings())

    def calculate(
        self,
        items: Sequence[BillLineItem],
        discount_percentage: Decimal | int | str = 0,
        offer_discount: Decimal | int | str = 0,
    ) -> BillCalculation:
        """
        Calculate a bill with the current tax configuration.

        A flat offer discount, when given, replaces the manual percentage and
        is converted to a percentage of the items total.

        Raises:
            ValidationError: If the percentage is outside [0, 100] or either
                discount is not a number
        """
        try:
            pct = Decimal(str(discount_percentage))
            offer_amount = Decimal(str(offer_discount))
        except InvalidOperation:
            raise ValidationError(
                "Discount must be a number",
                discount_percentage=str(discount_percentage),
                offer_discount=str(offer_discount),
            )

        try:
            validate_percentage(pct)
        except ValueError as e:
            raise ValidationError(str(e), discount_percentage=str(pct))

        if offer_amount < 0:
            raise ValidationError("Offer discount cannot be negative", offer_discount=str(offer_amount))

        tax_inclusive = self.is_tax_inclusive()
        rules = self.tax_rules()
        pct = effective_discount_percentage(items, offer_amount, pct)

        bill = calculate_bill(items, pct, rules, tax_inclusive=tax_inclusive)

        logger.debug(
            "Bill calculated",
            lines=len(items),
            tax_inclusive=tax_inclusive,
            discount_percentage=str(pct),
            final_amount=str(bill.final_amount),
        )
        return bill
