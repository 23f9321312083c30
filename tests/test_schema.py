import dataclasses
from datetime import datetime, timezone
from uuid import UUID

import pytest

from statuswatch.schema import (
    BaseModel,
    Component,
    Incident,
    IncidentUpdate,
    Subscription,
    SubscriptionForIncidentUpdate,
    WebhookExtension,
)
from statuswatch.types import ZERO_TIME


def test_incident_defaults_are_zero_values():
    incident = Incident(name="outage")
    assert incident.id == 0
    assert incident.deleted_at is None
    assert incident.impact is None
    assert incident.provider_created_at == ZERO_TIME


def test_subscription_uuid_defaults_to_nil():
    assert Subscription().uuid == UUID(int=0)


def test_base_fields_are_inherited():
    component = Component(id=4, name="api", service_id=2, provider_id="p1")
    assert isinstance(component, BaseModel)
    assert (component.id, component.name, component.service_id) == (4, "api", 2)


def test_fields_are_keyword_only():
    with pytest.raises(TypeError):
        Component("api")


def test_replace_keeps_other_fields():
    when = datetime(2024, 5, 1, tzinfo=timezone.utc)
    update = IncidentUpdate(description="down", provider_id="u1", status_time=when)
    moved = dataclasses.replace(update, incident_id=9)
    assert moved.incident_id == 9
    assert moved.description == "down"
    assert moved.status_time == when
    assert update.incident_id == 0


def test_nullable_columns_default_to_none():
    row = SubscriptionForIncidentUpdate(service_name="svc")
    assert row.component_id is None
    assert row.component_name is None
    assert row.incident_impact is None
    assert WebhookExtension().secret is None