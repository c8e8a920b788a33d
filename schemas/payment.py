from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional

LegalIdType = Literal["CC", "CE", "TI", "NIT", "PP"]


class CustomerDataIn(BaseModel):
    full_name: str = Field(min_length=1, max_length=150)
    email: EmailStr
    phone_number: str = Field(min_length=1, max_length=20, pattern=r"^[0-9]+$")
    legal_id: str = Field(min_length=1, max_length=30)
    legal_id_type: LegalIdType


class ShippingAddressIn(BaseModel):
    address_line_1: str = Field(min_length=1, max_length=255)
    address_line_2: Optional[str] = Field(None, max_length=255)
    region: str = Field(min_length=1, max_length=100)
    city: str = Field(min_length=1, max_length=100)
    phone_number: str = Field(min_length=1, max_length=20, pattern=r"^[0-9]+$")
    name: str = Field(min_length=1, max_length=150)


class CreateCheckoutRequest(BaseModel):
    customer_data: CustomerDataIn
    shipping_address: ShippingAddressIn
    collect_shipping: bool


class CustomerDataOut(BaseModel):
    full_name: str
    phone_number: str
    phone_number_prefix: str
    legal_id: str
    legal_id_type: str


class ShippingAddressOut(BaseModel):
    address_line_1: str
    address_line_2: Optional[str] = None
    region: str
    city: str
    country: str
    phone_number: str
    name: str


class CheckoutSessionOut(BaseModel):
    """Parameters for the payment widget. Never carries gateway secrets."""

    public_key: str
    currency: str
    amount_in_cents: int
    reference: str
    signature: str
    redirect_url: str
    customer_email: EmailStr
    customer_data: CustomerDataOut
    shipping_address: ShippingAddressOut
    order_id: int


class WebhookAck(BaseModel):
    received: bool = True
