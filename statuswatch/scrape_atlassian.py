"""Scraping incidents from Atlassian Statuspage JSON feeds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

import requests

from .eventqueue import IncidentQueue
from .schema import Incident, IncidentUpdate
from .scraper_core import (
    StatusPageIncident,
    StatusPageIncidentComponent,
    _parse_time,
    store_and_dispatch_incidents,
)
from .stores import Domain
from .types import INCIDENT_IN_PROGRESS, INCIDENT_RESOLVED, INCIDENT_TRIGGERED

_STATE_MAP = {
    "investigating": INCIDENT_IN_PROGRESS,
    "identified": INCIDENT_IN_PROGRESS,
    "monitoring": INCIDENT_IN_PROGRESS,
    "resolved": INCIDENT_RESOLVED,
    "postmortem": INCIDENT_RESOLVED,
}

_CLOSING_STATES = ("resolved", "postmortem")


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class AtlassianProvider:
    """A service whose incidents come from a Statuspage incidents feed."""

    incident_url: str
    service_id: int

    def scrap(
        self,
        session: requests.Session,
        domain: Domain,
        queue: Optional[IncidentQueue],
    ) -> list[IncidentUpdate]:
        """Fetch the feed, store its incidents and dispatch new updates."""
        response = session.get(self.incident_url)
        incidents: list[Any] = []
        if response.ok:
            document = response.json() or {}
            incidents = document.get("incidents") or []
        return store_and_dispatch_incidents(
            domain, queue, self.normalise_incidents(incidents)
        )

    def normalise_incidents(
        self, payload: Iterable[Mapping[str, Any]]
    ) -> list[StatusPageIncident]:
        """Turn the feed's list of incidents into status-page incidents."""
        result: list[StatusPageIncident] = []
        for item in payload:
            impact = _text(item, "impact")
            incident = Incident(
                name=_text(item, "name"),
                link=_text(item, "shortlink"),
                provider_impact=impact,
                impact=impact,
                service_id=self.service_id,
                provider_id=_text(item, "id"),
                provider_created_at=_parse_time(item.get("created_at")),
            )

            # The feed lists updates newest first; they are stored oldest first
            # so that dependent notifications are sent in order.
            updates: list[IncidentUpdate] = []
            raw_updates = list(reversed(item.get("incident_updates") or []))
            for position, raw in enumerate(raw_updates):
                provider_status = _text(raw, "status")
                status = self.normalise_provider_state(provider_status)
                if position == 0 and provider_status not in _CLOSING_STATES:
                    status = INCIDENT_TRIGGERED
                updates.append(
                    IncidentUpdate(
                        description=_text(raw, "body"),
                        provider_id=_text(raw, "id"),
                        status=status,
                        provider_status=provider_status,
                        status_time=_parse_time(raw.get("created_at")),
                    )
                )

            components = [
                StatusPageIncidentComponent(
                    provider_component_id=_text(raw, "id"),
                    component_name=_text(raw, "name"),
                )
                for raw in item.get("components") or []
            ]
            result.append(
                StatusPageIncident(
                    incident=incident,
                    incident_updates=updates,
                    incident_components=components,
                )
            )
        return result

    def normalise_provider_state(self, state: str) -> str:
        """Map a Statuspage update status to a normalised one; unknown gives ''."""
        return _STATE_MAP.get(state, "")