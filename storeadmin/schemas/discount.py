from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class DiscountBase(BaseModel):
    target_type: str = Field(validation_alias=AliasChoices("target_type", "targetType", "type"))
    target: str = ""
    percentage: float
    description: str = ""
    apply_to_all_products: bool = Field(
        default=False,
        validation_alias=AliasChoices("apply_to_all_products", "applyToAllProducts"),
    )

    model_config = ConfigDict(populate_by_name=True)


class DiscountCreate(DiscountBase):
    # Dates stay strings here so malformed input reaches the date parser.
    start_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    # Accepted for compatibility, never stored: status is always derived.
    status: Optional[str] = None


class DiscountUpdate(BaseModel):
    target_type: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("target_type", "targetType", "type"),
    )
    target: Optional[str] = None
    percentage: Optional[float] = None
    description: Optional[str] = None
    apply_to_all_products: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("apply_to_all_products", "applyToAllProducts"),
    )
    start_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    status: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class DiscountRead(DiscountBase):
    id: int
    start_date: date
    end_date: date
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class DiscountCounts(BaseModel):
    total: int
    active: int
    inactive: int
    future_plan: int


class DiscountListResponse(BaseModel):
    items: List[DiscountRead]
    counts: DiscountCounts


class BulkDiscountRequest(BaseModel):
    product_ids: List[int] = Field(validation_alias=AliasChoices("product_ids", "productIds"))

    model_config = ConfigDict(populate_by_name=True)


class BulkDiscountResponse(BaseModel):
    discounts: Dict[int, DiscountRead]
    count: int
