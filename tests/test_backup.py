"""
Tests for backup and restore.
"""
import json

import pytest
from fastapi.encoders import jsonable_encoder

from inventory_app.application.backup import validate_backup
from inventory_app.core.exceptions import BackupFormatError
from inventory_app.core.ports.backend import Query


class TestBackupValidation:
    """Test suite for the backup document shape"""

    @pytest.mark.parametrize("document", [
        None,
        [],
        {"items": [], "orders": []},
        {"items": [], "settings": {}},
        {"orders": [], "settings": {}},
        {"items": {}, "orders": [], "settings": {}},
    ])
    def test_invalid_documents(self, document):
        with pytest.raises(BackupFormatError):
            validate_backup(document)

    def test_minimal_valid_document(self):
        validate_backup({"items": [], "orders": [], "settings": {}})


class TestBackupRoundTrip:
    """Test suite for create_backup / restore_backup"""

    def test_backup_contains_everything(self, container, make_item, now):
        make_item(sku="A", name="A")
        make_item(sku="B", name="B")

        document = container.backup.create_backup("u1")

        assert document["timestamp"] == now.now.isoformat()
        assert len(document["items"]) == 2
        assert document["orders"] == []
        assert document["settings"]["currency"] == "MAD"
        assert container.activity.fetch_system_logs().data[0].action == "backup_created"

    def test_restore_from_json(self, container, make_item, backend):
        """Test: A backup serialised to JSON restores deleted and modified rows"""
        item = make_item(sku="A", name="Original")
        document = json.loads(json.dumps(jsonable_encoder(container.backup.create_backup("u1"))))

        backend.update("items", {"name": "Changed"}, Query().eq("id", item.id))

        restored = container.backup.restore_backup(document, "u1")

        assert restored == {"items": 1, "orders": 0}
        assert container.items.get_item(item.id).product_name == "Original"
        actions = [log.action for log in container.activity.fetch_system_logs().data]
        assert "backup_restored" in actions

    def test_restore_rejects_bad_document(self, container, backend):
        with pytest.raises(BackupFormatError):
            container.backup.restore_backup({"items": []}, "u1")
        assert backend.select("system_logs").rows == []
