from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

KOTStatusLiteral = Literal["placed", "preparing", "ready", "served"]
OrderTypeLiteral = Literal["dine-in", "takeaway"]
KOTUrgencyLiteral = Literal["ready", "critical", "delayed", "preparing", "new"]


class OrderItem(BaseModel):
    """One ticket line as read from the data store."""
    model_config = ConfigDict(frozen=True)

    id: str
    order_id: str
    menu_item_name: str = "Unknown"
    is_veg: bool = False
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0)
    # Kept as a plain string so unknown values reach the aggregation untouched
    status: str = "placed"
    created_at: datetime
    kot_batch_id: str | None = None
    kot_number: int | None = None
    # Denormalized order context
    order_type: OrderTypeLiteral = "dine-in"
    table_number: str | None = None
    customer_name: str | None = None

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Data-store timestamps without an offset are UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class KOTItem(BaseModel):
    """Item as shown on a kitchen ticket."""
    id: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    created_at: datetime
    status: str
    menu_item_name: str
    is_veg: bool


class KOT(BaseModel):
    """Kitchen order ticket aggregated from one batch of order items."""
    kot_number: int
    kot_batch_id: str
    order_id: str
    order_type: OrderTypeLiteral
    table_number: str | None = None
    customer_name: str | None = None
    kot_status: KOTStatusLiteral
    created_at: datetime
    items: List[KOTItem]


class KOTBoardEntry(BaseModel):
    """KOT with its age and urgency for the kitchen board."""
    kot: KOT
    age_minutes: int
    urgency: KOTUrgencyLiteral
