"""Storing scraped status-page incidents and handing new updates to the dispatcher."""

from __future__ import annotations

import dataclasses
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Optional, Sequence

from .eventqueue import IncidentPayload, IncidentQueue, QueueFull
from .schema import BaseModel, Component, Incident, IncidentComponent, IncidentUpdate
from .stores import Domain
from .types import ZERO_TIME, event_type

log = logging.getLogger(__name__)

_BASE_FIELDS = tuple(f.name for f in dataclasses.fields(BaseModel))

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|z|[+-]\d{2}:\d{2})"
)


def _parse_time(value: Any) -> datetime:
    """Parse an RFC 3339 timestamp; a missing value gives the zero time."""
    if value is None:
        return ZERO_TIME
    if not isinstance(value, str):
        raise ValueError(f"cannot parse {value!r} as a time")
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"cannot parse {value!r} as an RFC 3339 time")
    year, month, day, hour, minute, second = (int(match.group(n)) for n in range(1, 7))
    micro = int((match.group(7) or "").ljust(6, "0")[:6])
    zone = match.group(8)
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    return datetime(year, month, day, hour, minute, second, micro, tzinfo=tz)


@dataclass
class StatusPageIncidentComponent:
    """A component named by a status page, before it is linked to a stored one."""

    incident_component: IncidentComponent = field(default_factory=IncidentComponent)
    provider_component_id: str = ""
    component_name: str = ""


@dataclass
class StatusPageIncident:
    """An incident as scraped, with its updates and affected components."""

    incident: Incident
    incident_updates: list[IncidentUpdate] = field(default_factory=list)
    incident_components: list[StatusPageIncidentComponent] = field(default_factory=list)


def store_and_dispatch_incidents(
    domain: Domain,
    queue: Optional[IncidentQueue],
    incidents: Iterable[StatusPageIncident],
) -> list[IncidentUpdate]:
    """Store scraped incidents and publish their new updates when a queue is given."""
    updates = store_status_page_incidents(domain, incidents)
    if queue is not None:
        publish_updates(queue, updates)
    return updates


def store_status_page_incidents(
    domain: Domain, incidents: Iterable[StatusPageIncident]
) -> list[IncidentUpdate]:
    """Store incidents, updates and component links; return the newly stored updates."""
    incidents = list(incidents)
    stored = fetch_and_store_incidents(domain, incidents)
    updates, components = aggregate_updates_and_components(stored)
    new_updates = handle_incident_updates(domain, updates) if updates else []
    if components:
        handle_incident_components(domain, components, incidents[0].incident.service_id)
    return new_updates


def fetch_and_store_incidents(
    domain: Domain, incidents: Sequence[StatusPageIncident]
) -> list[StatusPageIncident]:
    """Insert unknown incidents and give every incident its stored id."""
    provider_ids = [item.incident.provider_id for item in incidents]
    by_provider = {item.incident.provider_id: item for item in incidents}
    existing = {
        incident.provider_id: incident
        for incident in domain.incident.get_by_provider_ids(provider_ids)
    }

    result: list[StatusPageIncident] = []
    new_incidents: list[Incident] = []
    for item in incidents:
        found = existing.get(item.incident.provider_id)
        if found is not None:
            result.append(add_incident_id(by_provider[item.incident.provider_id], found))
        else:
            new_incidents.append(item.incident)

    for inserted in domain.incident.create(new_incidents):
        source = by_provider.get(inserted.provider_id)
        if source is not None:
            result.append(add_incident_id(source, inserted))
    return result


def add_incident_id(incident: StatusPageIncident, base: BaseModel) -> StatusPageIncident:
    """Return a copy of the incident carrying the stored base columns and id."""
    base_values = {name: getattr(base, name) for name in _BASE_FIELDS}
    incident_id = base_values["id"]

    updates = [
        IncidentUpdate(
            incident_id=incident_id,
            description=update.description,
            provider_id=update.provider_id,
            status=update.status,
            provider_status=update.provider_status,
            status_time=update.status_time,
        )
        for update in incident.incident_updates
    ]
    components = [
        StatusPageIncidentComponent(
            incident_component=IncidentComponent(
                incident_id=incident_id,
                component_id=component.incident_component.component_id,
            ),
            provider_component_id=component.provider_component_id,
            component_name=component.component_name,
        )
        for component in incident.incident_components
    ]
    source = incident.incident
    stored = Incident(
        **base_values,
        name=source.name,
        link=source.link,
        provider_impact=source.provider_impact,
        impact=source.impact,
        service_id=source.service_id,
        provider_id=source.provider_id,
        provider_created_at=source.provider_created_at,
    )
    return StatusPageIncident(
        incident=stored, incident_updates=updates, incident_components=components
    )


def aggregate_updates_and_components(
    incidents: Iterable[StatusPageIncident],
) -> tuple[list[IncidentUpdate], list[StatusPageIncidentComponent]]:
    """Flatten the updates and components of all incidents, keeping their order."""
    updates: list[IncidentUpdate] = []
    components: list[StatusPageIncidentComponent] = []
    for incident in incidents:
        updates.extend(incident.incident_updates)
        components.extend(incident.incident_components)
    return updates, components


def handle_incident_updates(
    domain: Domain, updates: Sequence[IncidentUpdate]
) -> list[IncidentUpdate]:
    """Insert the updates not stored yet and return them as stored."""
    known = {
        update.provider_id
        for update in domain.incident.get_incident_updates_by_provider_ids(
            [update.provider_id for update in updates]
        )
    }
    fresh = [update for update in updates if update.provider_id not in known]
    return domain.incident.create_incident_updates(fresh)


def handle_incident_components(
    domain: Domain,
    components: Sequence[StatusPageIncidentComponent],
    service_id: int,
) -> None:
    """Link incidents to components, creating components the service lacks."""
    known = {
        component.provider_id: component
        for component in domain.component.get_all_by_service_id(service_id)
    }
    links: list[IncidentComponent] = []
    for item in components:
        component = known.get(item.provider_component_id)
        if component is None:
            created = domain.component.create(
                [
                    Component(
                        name=item.component_name,
                        provider_id=item.provider_component_id,
                        service_id=service_id,
                    )
                ]
            )
            if not created:
                raise LookupError(
                    f"component {item.provider_component_id!r} could not be created"
                )
            component = created[0]
            known[item.provider_component_id] = component
        links.append(
            IncidentComponent(
                incident_id=item.incident_component.incident_id,
                component_id=component.id,
            )
        )
    domain.incident.create_incident_components(links)


def publish_updates(queue: IncidentQueue, updates: Iterable[IncidentUpdate]) -> None:
    """Publish each update with its event type; updates that do not fit are dropped."""
    for update in updates:
        try:
            queue.publish(
                IncidentPayload(incident_update=update, state=event_type(update.status))
            )
        except QueueFull:
            log.warning("dispatcher queue full, dropping update %s", update.provider_id)