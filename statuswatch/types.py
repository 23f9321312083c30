"""Shared constants and the event passed from the dispatcher to its workers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Keys under which request-scoped values are stored.
SERVICE_ID_CTX = "serviceID"
SUBSCRIPTION_CTX = "subscription"
SUBSCRIPTION_ID_CTX = "subscriptionID"

JSON = dict[str, Any]

# The zero value used for timestamps that were never set.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

INCIDENT = "incident"
INCIDENT_TRIGGERED = "triggered"
INCIDENT_IN_PROGRESS = "in_progress"
INCIDENT_RESOLVED = "resolved"


def event_type(status: str) -> str:
    """Return the dispatcher event type for a normalised incident status."""
    return f"{INCIDENT}.{status}"


INCIDENT_TRIGGERED_EVENT_TYPE = event_type(INCIDENT_TRIGGERED)
INCIDENT_IN_PROGRESS_EVENT_TYPE = event_type(INCIDENT_IN_PROGRESS)
INCIDENT_RESOLVED_EVENT_TYPE = event_type(INCIDENT_RESOLVED)

ATLASSIAN_PROVIDER_TYPE = "atlassian"
STATUSIO_PROVIDER_TYPE = "statusio"
SQUADCAST_PROVIDER_TYPE = "squadcast"

SLACK_WORKER = "slack"
MSTEAMS_WORKER = "msteams"
DISCORD_WORKER = "discord"
SQUADCAST_WORKER = "squadcast"
PAGERDUTY_WORKER = "pagerduty"
WEBHOOK_WORKER = "webhook"


@dataclass(frozen=True)
class ComponentRef:
    """A component affected by an incident, by name and id."""

    name: str = ""
    id: int = 0


@dataclass(kw_only=True)
class WorkerEvent:
    """Everything a notification worker needs to report one incident update."""

    service_id: int = 0
    service_name: str = ""
    incident_id: int = 0
    incident_name: str = ""
    incident_link: str = ""
    incident_impact: str = ""
    incident_update: str = ""
    incident_update_id: int = 0
    incident_update_provider_status: str = ""
    incident_update_status: str = ""
    components: list[ComponentRef] = field(default_factory=list)
    is_all_components: bool = False
    event_type: str = ""
    incident_update_status_time: datetime = ZERO_TIME