from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LifecycleState(str, Enum):
    active = "active"
    expiring_soon = "expiring-soon"
    expired = "expired"
    unknown = "unknown"


class BackendModel(BaseModel):
    """Base for records owned by the remote API (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class User(BackendModel):
    id: str = Field(alias="_id")
    username: str
    email: Optional[str] = None
    role: str = "user"
    profile_picture: Optional[str] = Field(default=None, alias="profilePicture")


class AuthResponse(BackendModel):
    token: str
    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")
    user: User


class Warranty(BackendModel):
    id: str = Field(alias="_id")
    product_name: str = Field(alias="productName")
    purchase_date: str = Field(alias="purchaseDate")
    warranty_end_date: Optional[str] = Field(default=None, alias="warrantyEndDate")
    user: Optional[str] = None
    warranty_length: Optional[float] = Field(default=None, alias="warrantyLength")  # months
    notes: Optional[str] = None
    document_url: Optional[str] = Field(default=None, alias="documentUrl")
    category: Optional[str] = None
    retailer: Optional[str] = None
    purchase_price: Optional[float] = Field(default=None, alias="purchasePrice")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class WarrantyCreate(BackendModel):
    """Body for registering or editing a warranty; needs a length or an end date."""

    product_name: str = Field(alias="productName", min_length=1)
    purchase_date: date = Field(alias="purchaseDate")
    warranty_length: Optional[int] = Field(default=None, alias="warrantyLength", gt=0)  # months
    warranty_end_date: Optional[date] = Field(default=None, alias="warrantyEndDate")
    notes: Optional[str] = None
    document_url: Optional[str] = Field(default=None, alias="documentUrl")
    category: Optional[str] = None
    retailer: Optional[str] = None
    purchase_price: Optional[float] = Field(default=None, alias="purchasePrice", gt=0)

    @model_validator(mode="after")
    def _length_or_end_date(self):
        if not self.warranty_length and not self.warranty_end_date:
            raise ValueError("Either warranty length or end date must be provided.")
        return self

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ClassifiedWarranty(Warranty):
    status: LifecycleState
    days_remaining: Optional[int] = Field(default=None, alias="daysRemaining")
    badge: str


class Product(BackendModel):
    id: str = Field(alias="_id")
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    model_number: Optional[str] = Field(default=None, alias="modelNumber")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class ProductPage(BackendModel):
    products: List[Product] = Field(default_factory=list)
    total: int = 0
    pages: int = 0


class ExpiryAlert(BackendModel):
    title: str
    description: str
    duration_ms: int = Field(alias="durationMs")


class DashboardView(BackendModel):
    expiring: List[ClassifiedWarranty] = Field(default_factory=list)
    active: List[ClassifiedWarranty] = Field(default_factory=list)
    alert: Optional[ExpiryAlert] = None
    expiring_error: Optional[str] = Field(default=None, alias="expiringError")
