from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import OrderStatus

CENTS = Decimal("0.01")


class Profile(BaseModel):
    """The caller's profile as returned by the user service."""
    id: str
    name: str
    email: str

    model_config = ConfigDict(coerce_numbers_to_str=True)


class Product(BaseModel):
    """A catalog entry as returned by the product service."""
    id: str
    name: str
    price: Decimal = Field(ge=0)
    stock: int

    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("price")
    @classmethod
    def whole_cents(cls, value: Decimal) -> Decimal:
        # Stored as Numeric(12, 2); a finer price cannot be snapshotted as reported
        if value != value.quantize(CENTS):
            raise ValueError(f"price {value} has sub-cent precision")
        return value


@dataclass(frozen=True)
class OrderSnapshot:
    user_id: str
    user_name: str
    user_email: str
    product_id: str
    product_name: str
    product_price: Decimal
    quantity: int
    total_price: Decimal


class OrderCreate(BaseModel):
    product_id: str = Field(alias="productId")
    quantity: int = Field(gt=0)

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderResponse(BaseModel):
    id: int
    user_id: str
    user_name: str
    user_email: str
    product_id: str
    product_name: str
    product_price: Decimal
    quantity: int
    total_price: Decimal
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
