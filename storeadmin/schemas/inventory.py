from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class InventoryRead(BaseModel):
    id: int
    product_id: int
    product_name: str
    stock: int
    size_stock: Dict[str, int]
    color_stock: Dict[str, int]
    color_size_stock: Dict[str, Dict[str, int]]
    status: str
    tags: List[str]
    version_id: int
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InventoryDetail(InventoryRead):
    discrepancies: List[str] = Field(default_factory=list)


class InventoryCounts(BaseModel):
    total: int
    in_stock: int
    out_of_stock: int
    newly_added: int


class InventoryListResponse(BaseModel):
    items: List[InventoryRead]
    counts: InventoryCounts


class InventoryLookupResponse(BaseModel):
    inventory: Optional[InventoryRead] = None
    message: str


class StockAdjustment(BaseModel):
    delta: StrictInt
    size: Optional[str] = None
    color: Optional[str] = None


class ColorRegistration(BaseModel):
    colors: List[str] = Field(min_length=1)


class InventoryQueryItem(BaseModel):
    inventory_id: int
    product_id: int
    product_name: str
    quantity: int


class InventoryQueryResponse(BaseModel):
    total_quantity: int
    count: int
    items: List[InventoryQueryItem]


class ColorSizeReportRow(BaseModel):
    color: str
    size: str
    total_quantity: int
    product_count: int


class OrderLineItem(BaseModel):
    product_id: int
    quantity: StrictInt = Field(gt=0)
    size: Optional[str] = None
    color: Optional[str] = None


class OrderReductionRequest(BaseModel):
    line_items: List[OrderLineItem] = Field(min_length=1)


class OrderLineResult(BaseModel):
    product_id: int
    ok: bool
    inventory_id: Optional[int] = None
    stock: Optional[int] = None
    error: Optional[str] = None
    dimension: Optional[str] = None


class OrderReductionResponse(BaseModel):
    results: List[OrderLineResult]
    succeeded: int
    failed: int
