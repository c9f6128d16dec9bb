"""
Tests for warehouses, organizations, notifications and settings.
"""
import pytest

from inventory_app.core.domain.models import SettingsUpdate, WarehouseSave
from inventory_app.core.exceptions import NotFoundError, ValidationError


class TestWarehouses:
    """Test suite for WarehouseService"""

    def test_items_count_counts_active_items(self, container, make_item, warehouse):
        """Test: items_count is computed from active items on read"""
        make_item(sku="A", name="A")
        trashed = make_item(sku="B", name="B")
        container.items.soft_delete_item(trashed.id)

        page = container.warehouses.fetch_warehouses()

        assert page.count == 1
        assert page.data[0].items_count == 1

    def test_save_inserts_then_updates(self, container, now):
        created = container.warehouses.save_warehouse(WarehouseSave(name="Tangier", location="Port zone"))
        now.advance(minutes=5)

        updated = container.warehouses.save_warehouse(
            WarehouseSave(id=created.id, name="Tangier Med", location="Port zone")
        )

        assert updated.id == created.id
        assert updated.name == "Tangier Med"
        assert updated.updated_at == now.now

    def test_name_and_location_required(self, container):
        with pytest.raises(ValidationError) as exc_info:
            container.warehouses.save_warehouse(WarehouseSave(name="Nowhere"))
        assert exc_info.value.message == "Name and location are required"

    def test_delete(self, container):
        created = container.warehouses.save_warehouse(WarehouseSave(name="Fes", location="Medina"))

        container.warehouses.delete_warehouse(created.id)

        assert container.warehouses.fetch_warehouses().count == 0
        with pytest.raises(NotFoundError):
            container.warehouses.delete_warehouse(created.id)


class TestOrganizations:
    """Test suite for OrganizationService"""

    def test_create_and_toggle(self, container):
        org = container.organizations.create_organization("Souk Co")
        assert org.is_active is True

        container.organizations.set_organization_status(org.id, False)

        assert container.organizations.fetch_organizations(is_active=False).count == 1
        assert container.organizations.fetch_organizations(is_active=True).count == 0

    def test_name_required(self, container):
        with pytest.raises(ValidationError):
            container.organizations.create_organization("  ")

    def test_summary(self, container, backend, auth):
        org = container.organizations.create_organization("Souk Co")
        user_id = auth.add_user("member@souk.test")
        backend.insert("profiles", {"id": user_id, "email": "member@souk.test"})
        container.users.assign_user_to_organization(user_id, org.id)
        warehouse = backend.insert("warehouses", {"name": "W", "location": "L", "organization_id": org.id})
        backend.insert("items", {"sku": "S", "name": "N", "warehouse_id": warehouse["id"], "organization_id": org.id})
        backend.insert("orders", {"status": "pending", "total_amount": 10, "organization_id": org.id})

        summary = container.organizations.organization_summary()

        assert len(summary) == 1
        assert summary[0].total_users == 1
        assert summary[0].total_items == 1
        assert summary[0].total_orders == 1
        assert summary[0].last_order_date is not None


class TestNotifications:
    """Test suite for NotificationService"""

    def test_unread_and_mark_as_read(self, container):
        first = container.notifications.create_notification("Low stock: Mint Tea", user_id="u1")
        container.notifications.create_notification("Order shipped", user_id="u1")
        container.notifications.create_notification("Other user", user_id="u2")

        assert container.notifications.unread_count("u1") == 2

        result = container.notifications.mark_notifications_as_read([first.id])

        assert result == {"success": True, "count": 1}
        assert container.notifications.unread_count("u1") == 1
        assert container.notifications.fetch_notifications(unread_only=True, user_id="u1").count == 1

    def test_mark_empty_list_is_noop(self, container):
        assert container.notifications.mark_notifications_as_read([]) == {"success": True, "count": 0}


class TestSettings:
    """Test suite for SettingsService"""

    def test_defaults_created_lazily(self, container, backend):
        assert backend.select("settings").rows == []

        settings = container.settings_service.get_settings("u1")

        assert (settings.currency, settings.language, settings.theme, settings.backup_frequency) == (
            "MAD", "en", "light", "weekly"
        )
        container.settings_service.get_settings("u1")
        assert len(backend.select("settings").rows) == 1

    def test_update_validates(self, container):
        with pytest.raises(ValidationError):
            container.settings_service.update_settings("u1", SettingsUpdate(currency="GBP"))

        updated = container.settings_service.update_settings("u1", SettingsUpdate(currency="EUR", language="fr"))

        assert updated.currency == "EUR"
        assert updated.language == "fr"
