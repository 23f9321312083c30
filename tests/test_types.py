import pytest

from statuswatch.types import (
    INCIDENT,
    INCIDENT_IN_PROGRESS,
    INCIDENT_IN_PROGRESS_EVENT_TYPE,
    INCIDENT_RESOLVED,
    INCIDENT_RESOLVED_EVENT_TYPE,
    INCIDENT_TRIGGERED,
    INCIDENT_TRIGGERED_EVENT_TYPE,
    ZERO_TIME,
    ComponentRef,
    WorkerEvent,
    event_type,
)


def test_event_type_joins_with_dot():
    assert event_type(INCIDENT_RESOLVED) == INCIDENT_RESOLVED_EVENT_TYPE
    assert event_type("triggered") == "incident.triggered"


@pytest.mark.parametrize(
    "status, expected",
    [
        (INCIDENT_TRIGGERED, INCIDENT_TRIGGERED_EVENT_TYPE),
        (INCIDENT_IN_PROGRESS, INCIDENT_IN_PROGRESS_EVENT_TYPE),
        (INCIDENT_RESOLVED, INCIDENT_RESOLVED_EVENT_TYPE),
    ],
)
def test_event_types_match_statuses(status, expected):
    result = event_type(status)
    assert result == expected
    assert result.startswith(INCIDENT + ".")


def test_event_type_in_progress_value():
    assert event_type("in_progress") == "incident.in_progress"


def test_worker_event_components_not_shared():
    first = WorkerEvent()
    second = WorkerEvent()
    first.components.append(ComponentRef(name="api", id=1))
    assert second.components == []
    assert first.components == [ComponentRef(name="api", id=1)]


def test_worker_event_default_time_is_zero():
    event = WorkerEvent(service_name="svc")
    assert event.incident_update_status_time == ZERO_TIME
    assert event.incident_update_status_time.year == 1


def test_component_ref_is_hashable_by_value():
    refs = {ComponentRef(name="db", id=2), ComponentRef(name="db", id=2)}
    assert len(refs) == 1