"""Unit tests for BaseModel, exercised through ``Retailer``."""

from __future__ import annotations

import uuid
from datetime import date, timedelta

import pytest
from freezegun import freeze_time

from modules.retailers.models import Retailer

pytestmark = pytest.mark.unit


class TestBaseModel:
    """Tests for UUIDv7 PK and timestamp behaviour."""

    def test_id_is_uuid_version_7(self):
        obj = Retailer.objects.create(name="test")
        assert isinstance(obj.id, uuid.UUID)
        assert obj.id.version == 7

    def test_ids_are_time_ordered(self):
        """UUIDv7 encodes timestamp, so sequential creates yield ordered IDs."""
        a = Retailer.objects.create(name="first")
        b = Retailer.objects.create(name="second")
        assert str(a.id) < str(b.id)

    def test_updated_at_changes_on_save(self):
        with freeze_time("2026-01-10 09:00:00"):
            obj = Retailer.objects.create(name="original")
        with freeze_time("2026-01-10 10:00:00"):
            obj.name = "modified"
            obj.save()
        obj.refresh_from_db()
        assert obj.updated_at - obj.created_at == timedelta(hours=1)

    def test_save_with_update_fields_includes_updated_at(self):
        """The save() guard must inject updated_at into update_fields."""
        with freeze_time("2026-01-10 09:00:00"):
            obj = Retailer.objects.create(name="original")
        with freeze_time("2026-01-11 09:00:00"):
            obj.name = "modified"
            obj.save(update_fields=["name"])
        obj.refresh_from_db()
        assert obj.name == "modified"
        assert obj.updated_at.date() == date(2026, 1, 11)

    def test_id_is_not_editable(self):
        field = Retailer._meta.get_field("id")
        assert field.editable is False
