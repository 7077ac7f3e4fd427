from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, Field, model_validator

from kiosk.models.base import UpstreamModel


class Money(UpstreamModel):
    # vehicle cost and deductible come as {value, currency}, prices as {amount, ...}
    amount: Decimal = Field(ge=0, validation_alias=AliasChoices("amount", "value"))
    currency: str = Field(min_length=1)
    prefix: str = ""
    suffix: str = ""


class Price(UpstreamModel):
    discount_percentage: Decimal = Field(default=Decimal(0), ge=0, le=100)
    display_price: Money
    list_price: Optional[Money] = None
    total_price: Optional[Money] = None

    @model_validator(mode="after")
    def check_totals(self):
        # addon prices only carry a display price
        if self.total_price is None:
            self.total_price = self.display_price
        if self.list_price is None:
            return self
        if self.total_price.currency != self.list_price.currency:
            raise ValueError(
                f"total price currency {self.total_price.currency} differs from "
                f"list price currency {self.list_price.currency}"
            )
        if self.total_price.amount > self.list_price.amount:
            raise ValueError(
                f"total price {self.total_price.amount} exceeds list price {self.list_price.amount}"
            )
        return self

    @property
    def is_discounted(self) -> bool:
        return self.list_price is not None
