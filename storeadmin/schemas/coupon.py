from datetime import date, datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CouponBase(BaseModel):
    code: str = Field(min_length=1)
    scope: str = "general"
    target: str = ""
    price: Optional[float] = None
    discount: float
    min_order_value: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("min_order_value", "minOrderValue"),
    )
    description: str = ""
    customer_eligibility: str = Field(
        default="all",
        validation_alias=AliasChoices("customer_eligibility", "customerEligibility"),
    )
    usage_limit: int = Field(default=0, validation_alias=AliasChoices("usage_limit", "usageLimit"))
    one_time_use: bool = Field(default=False, validation_alias=AliasChoices("one_time_use", "oneTimeUse"))

    model_config = ConfigDict(populate_by_name=True)


class CouponCreate(CouponBase):
    start_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    status: Optional[str] = None


class CouponUpdate(BaseModel):
    code: Optional[str] = None
    scope: Optional[str] = None
    target: Optional[str] = None
    price: Optional[float] = None
    discount: Optional[float] = None
    min_order_value: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("min_order_value", "minOrderValue"),
    )
    description: Optional[str] = None
    customer_eligibility: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("customer_eligibility", "customerEligibility"),
    )
    usage_limit: Optional[int] = Field(default=None, validation_alias=AliasChoices("usage_limit", "usageLimit"))
    one_time_use: Optional[bool] = Field(default=None, validation_alias=AliasChoices("one_time_use", "oneTimeUse"))
    start_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    status: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class CouponRead(CouponBase):
    id: int
    start_date: date
    end_date: date
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class CouponCounts(BaseModel):
    total: int
    active: int
    inactive: int
    future: int


class CouponListResponse(BaseModel):
    items: List[CouponRead]
    counts: CouponCounts


class CouponValidateRequest(BaseModel):
    code: str
    subtotal: float = Field(ge=0)


class CouponValidateResponse(BaseModel):
    valid: bool
    coupon_id: int
    code: str
    discount_percentage: float
    discount_amount: float
    final_total: float


class StatusChange(BaseModel):
    id: int
    code: Optional[str] = None
    previous: str
    current: str


class StatusRefreshResponse(BaseModel):
    dry_run: bool
    updated: int
    changes: List[StatusChange]
