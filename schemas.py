"""
Database Schemas for Vegetable Inventory App

Each Pydantic model corresponds to a MongoDB collection:
- Item -> "items"
- Transaction -> "transactions"
- Expense -> "expenses"
- Supplier -> "suppliers"
- Godown -> "godowns"
- Settings -> "settings" (single document, type="appSettings")

These are used for validation in API endpoints. Numeric fields accept text
input ("100") and are stored as numbers.
"""
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

Category = Literal["potatoes", "tomatoes", "other"]
TransactionType = Literal["purchase", "sale"]

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class Item(BaseModel):
    name: str = Field(..., min_length=1, description="Vegetable name")
    category: Category = Field(..., description="potatoes, tomatoes or other")
    quantity: float = Field(..., ge=0, description="Quantity on hand, in unit")
    unit: str = Field(..., min_length=1, description="kg, g, lb, pcs")
    price: float = Field(..., ge=0, description="Price per unit")
    supplier: Optional[str] = Field(None, description="Reference to supplier _id")
    godown: Optional[str] = Field(None, description="Reference to godown _id")
    bag_count: Optional[int] = Field(None, ge=0, description="Number of bags")


class ItemUpdate(BaseModel):
    """Partial item update; only fields sent by the caller are written."""
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[Category] = None
    quantity: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = None
    godown: Optional[str] = None
    bag_count: Optional[int] = Field(None, ge=0)

    @field_validator("name", "category", "quantity", "unit", "price")
    @classmethod
    def required_fields_not_null(cls, v):
        # These may be omitted, but an explicit null would break the stored item.
        if v is None:
            raise ValueError("must not be null")
        return v


class Transaction(BaseModel):
    item_id: str = Field(..., description="Reference to item _id")
    type: TransactionType = Field(..., description="purchase or sale")
    quantity: float = Field(..., gt=0)
    price: float = Field(..., gt=0, description="Unit price at time of transaction")
    date: Optional[str] = Field(None, pattern=DATE_PATTERN, description="YYYY-MM-DD, defaults to today")


class Expense(BaseModel):
    item_id: str = Field(..., description="Reference to item _id")
    description: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    date: Optional[str] = Field(None, pattern=DATE_PATTERN, description="YYYY-MM-DD, defaults to today")


class Supplier(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    contact: Optional[str] = None
    address: Optional[str] = None
    email: Optional[EmailStr] = None


class Godown(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    address: Optional[str] = None
    capacity: Optional[float] = Field(None, ge=0)


class ReportSettings(BaseModel):
    company_name: str = "Vegetable Inventory Management"
    address: str = ""
    contact: str = ""
    email: str = ""
    gstin: str = Field("", description="Tax id printed on reports")


class Settings(BaseModel):
    theme: str = "light"
    low_stock_threshold: float = Field(30, ge=0)
    default_currency: str = "INR"
    notifications: bool = True
    report_settings: ReportSettings = Field(default_factory=ReportSettings)


class SettingsUpdate(BaseModel):
    theme: Optional[str] = None
    low_stock_threshold: Optional[float] = Field(None, ge=0)
    default_currency: Optional[str] = None
    notifications: Optional[bool] = None
    report_settings: Optional[ReportSettings] = None
