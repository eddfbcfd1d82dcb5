"""
Schemas for The Mom Chef API

Each stored model maps to one JSON collection file:
- Customer -> "customers"
- Order -> "orders"
- Reservation -> "reservations"
- Menu items are opaque and stored as sent by the admin panel
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional, Union

MENU = "menu"
ORDERS = "orders"
RESERVATIONS = "reservations"
CUSTOMERS = "customers"

Scalar = Union[str, int]


class Customer(BaseModel):
    id: int = Field(..., description="Server-assigned, strictly increasing per collection")
    name: Optional[str] = None
    email: str
    phone: Optional[Scalar] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[Scalar] = None
    dob: Optional[str] = None
    signupDate: str = Field(..., description="UTC ISO-8601 timestamp set at signup")


class SignupRequest(BaseModel):
    name: Optional[str] = None
    email: str
    phone: Optional[Scalar] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[Scalar] = None
    dob: Optional[str] = None
    password: Optional[str] = Field(None, description="Accepted but never stored")


class Order(BaseModel):
    # Caller-supplied fields are kept as-is next to the generated ones
    model_config = ConfigDict(extra="allow")

    id: int
    date: str


class Reservation(Order):
    pass


class UpdateMenuRequest(BaseModel):
    # Shape of menu is checked only once the password matches
    password: Optional[Any] = None
    menu: Optional[Any] = None


class MessageResponse(BaseModel):
    message: str


class SignupResponse(BaseModel):
    message: str
    customer: Customer


class OrderResponse(BaseModel):
    message: str
    order: Order


class ReservationResponse(BaseModel):
    message: str
    reservation: Reservation
