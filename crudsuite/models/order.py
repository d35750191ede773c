# crudsuite/models/order.py
from pydantic import BaseModel, Field
from typing import List

from crudsuite.models.workflow import OrderStatus


class OrderItemIn(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class ShippingInfo(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    zip: str = Field(min_length=1)
    country: str = Field(min_length=1)


class PaymentIn(BaseModel):
    # only the last four digits are ever stored
    card_number: str = Field(pattern=r"^[0-9 ]{4,23}$")
    card_name: str = Field(min_length=1)

    def last4(self) -> str:
        digits = self.card_number.replace(" ", "")
        return digits[-4:]


class OrderCreate(BaseModel):
    items: List[OrderItemIn] = Field(min_length=1)
    shipping_info: ShippingInfo
    payment_info: PaymentIn


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
