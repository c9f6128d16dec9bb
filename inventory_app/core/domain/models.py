"""
Pydantic models for the entities stored in the hosted backend.

Rows are consumed as plain records; these models describe the request
payloads the API accepts and the rows it returns.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Paginated result of a data-access fetch."""
    data: List[T] = []
    count: int = 0
    page: int = 1
    page_size: int = 20
    total_pages: int = 0


# ============================================================================
# ORGANIZATIONS & USERS
# ============================================================================

class Organization(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1)


class OrganizationSummary(BaseModel):
    organization_id: str
    organization_name: str
    total_users: int = 0
    total_items: int = 0
    total_orders: int = 0
    last_order_date: Optional[datetime] = None


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Profile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = UserRole.USER.value
    is_active: bool = True
    created_at: Optional[datetime] = None


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    role: str = UserRole.USER.value
    profile: Optional[Profile] = None
    access_token: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class UserCreate(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.USER


class StatusUpdate(BaseModel):
    is_active: bool


# ============================================================================
# WAREHOUSES
# ============================================================================

class Warehouse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    location: str
    organization_id: Optional[str] = None
    items_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WarehouseSave(BaseModel):
    id: Optional[str] = None
    name: str = ""
    location: str = ""
    organization_id: Optional[str] = None


# ============================================================================
# ITEMS
# ============================================================================

class ItemInput(BaseModel):
    """Fields accepted when adding or editing an item."""
    sku: str = ""
    name: str = ""
    warehouse_id: Optional[str] = None
    boxes: int = Field(0, ge=0)
    units_per_box: int = Field(0, ge=0)
    bought_price: float = Field(0, ge=0)
    shipment_fees: float = Field(0, ge=0)
    selling_price: float = Field(0, ge=0)
    low_stock_threshold: int = Field(0, ge=0)
    currency: str = "MAD"
    image: Optional[str] = None
    organization_id: Optional[str] = None


# ============================================================================
# CUSTOMERS & ORDERS
# ============================================================================

class Customer(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone: str
    address: str
    organization_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerInput(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    organization_id: Optional[str] = None


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderLineInput(BaseModel):
    item_id: str
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0)


class OrderCreate(BaseModel):
    customer_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    lines: List[OrderLineInput] = []
    organization_id: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    order_id: Optional[str] = None
    item_id: Optional[str] = None
    quantity: int
    price: float


class Order(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: Optional[str] = None
    status: str
    total_amount: float
    organization_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItem] = []


# ============================================================================
# NOTIFICATIONS, SETTINGS, LOGS
# ============================================================================

class Notification(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    message: str
    is_read: bool = False
    type: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None


class MarkAsReadRequest(BaseModel):
    ids: List[str] = []


class UserSettings(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    currency: str = "MAD"
    language: str = "en"
    theme: str = "light"
    backup_frequency: str = "weekly"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SettingsUpdate(BaseModel):
    currency: Optional[str] = None
    language: Optional[str] = None
    theme: Optional[str] = None
    backup_frequency: Optional[str] = None


class SystemLog(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    action: str
    details: Optional[Any] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None


class AuditLog(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    action: str
    schema_name: str = "public"
    table_name: str
    query_details: Optional[Dict[str, Any]] = None
    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    created_at: Optional[datetime] = None


# ============================================================================
# AUTH PAYLOADS
# ============================================================================

class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class SignUpRequest(BaseModel):
    email: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""


class PasswordResetRequest(BaseModel):
    email: str = ""


class PasswordUpdateRequest(BaseModel):
    new_password: str = ""


class AssignOrganizationRequest(BaseModel):
    organization_id: str
