from datetime import datetime
from typing import List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    category: str = ""
    sub_category: str = Field(
        default="",
        validation_alias=AliasChoices("sub_category", "subCategory"),
    )
    price: float = Field(default=0, ge=0)
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ProductCreate(ProductBase):
    pass


class ProductRead(ProductBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
