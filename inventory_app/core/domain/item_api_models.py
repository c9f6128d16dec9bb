"""
Pydantic models for the item views returned to the frontend.

Field aliases follow the camelCase names the Items and RecycleBin screens
read (``stockCode``, ``productName``, ...).
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

PLACEHOLDER_IMAGE = "/placeholder.svg"


class StockStatus(str, Enum):
    IN_STOCK = "In Stock"
    OUT_OF_STOCK = "Out of Stock"


class ItemSortField(str, Enum):
    NAME = "name"
    SKU = "sku"
    QUANTITY = "quantity"
    SELLING_PRICE = "selling_price"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ItemView(BaseModel):
    """
    Normalised item as shown in the inventory table.

    Prices are kept as numbers and also pre-formatted for the caller's
    currency and language.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str
    stock_code: str = Field(..., alias="stockCode")
    product_name: str = Field(..., alias="productName")
    image: str = PLACEHOLDER_IMAGE
    boxes: int = 0
    units_per_box: int = Field(0, alias="unitsPerBox")
    initial_price: float = Field(0, alias="initialPrice", description="bought_price + shipment_fees")
    selling_price: float = Field(0, alias="sellingPrice")
    location: str = ""
    warehouse_id: Optional[str] = Field(None, alias="warehouseId")
    stock_status: StockStatus = Field(StockStatus.OUT_OF_STOCK, alias="stockStatus")
    units_left: int = Field(0, alias="unitsLeft")
    low_stock_threshold: int = Field(0, alias="lowStockThreshold")
    currency: str = "MAD"
    formatted_initial_price: str = Field("", alias="formattedInitialPrice")
    formatted_selling_price: str = Field("", alias="formattedSellingPrice")
    deleted_at: Optional[datetime] = Field(None, alias="deletedAt")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")


class DeletedItemView(ItemView):
    """Trashed item with the number of days left before it may be purged."""
    days_remaining: int = Field(0, alias="daysRemaining")


class PurgeResult(BaseModel):
    purged: int = 0
