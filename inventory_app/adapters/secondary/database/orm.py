import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text

from inventory_app.adapters.secondary.database.config import Base
from inventory_app.core.timeutils import utcnow


def _uuid() -> str:
    return str(uuid.uuid4())


class OrganizationModel(Base):
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)


class ProfileModel(Base):
    """Mirror of the auth user; ``id`` is the auth user id."""
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), index=True)
    first_name = Column(String(255))
    last_name = Column(String(255))
    role = Column(String(50), default="user")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)


class UserOrganizationModel(Base):
    __tablename__ = "user_organizations"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("profiles.id"), index=True, nullable=False)
    organization_id = Column(String(36), ForeignKey("organizations.id"), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class WarehouseModel(Base):
    __tablename__ = "warehouses"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)


class ItemModel(Base):
    __tablename__ = "items"

    id = Column(String(36), primary_key=True, default=_uuid)
    sku = Column(String(100), index=True, nullable=False)
    name = Column(String(255), index=True, nullable=False)
    image = Column(Text, nullable=True)
    boxes = Column(Integer, default=0)
    units_per_box = Column(Integer, default=0)
    bought_price = Column(Float, default=0)
    shipment_fees = Column(Float, default=0)
    selling_price = Column(Float, default=0)
    quantity = Column(Integer, default=0)
    low_stock_threshold = Column(Integer, default=0)
    currency = Column(String(3), default="MAD")
    warehouse_id = Column(String(36), ForeignKey("warehouses.id"), nullable=True, index=True)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True)
    deleted_at = Column(DateTime, nullable=True, index=True)  # soft delete marker
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)


class CustomerModel(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    address = Column(Text, nullable=False)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=_uuid)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=True, index=True)
    status = Column(String(20), default="pending", nullable=False)
    total_amount = Column(Float, default=0)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow)


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    item_id = Column(String(36), ForeignKey("items.id"), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class NotificationModel(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_uuid)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    type = Column(String(50), nullable=True)
    user_id = Column(String(36), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, index=True)


class SettingsModel(Base):
    __tablename__ = "settings"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), nullable=True, index=True)
    organization_id = Column(String(36), nullable=True)
    currency = Column(String(3), default="MAD")
    language = Column(String(5), default="en")
    theme = Column(String(10), default="light")
    backup_frequency = Column(String(20), default="weekly")
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)


class SystemLogModel(Base):
    __tablename__ = "system_logs"

    id = Column(String(36), primary_key=True, default=_uuid)
    action = Column(String(100), nullable=False)
    details = Column(JSON, nullable=True)
    user_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)


class AuditLogModel(Base):
    __tablename__ = "system_audit_logs"

    id = Column(String(36), primary_key=True, default=_uuid)
    action = Column(String(20), nullable=False)
    schema_name = Column(String(63), default="public")
    table_name = Column(String(63), nullable=False, index=True)
    query_details = Column(JSON, nullable=True)
    user_id = Column(String(36), nullable=True)
    organization_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
