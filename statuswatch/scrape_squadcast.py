"""Scraping incidents from Squadcast status pages."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

import requests
from bs4 import BeautifulSoup, NavigableString

from .eventqueue import IncidentQueue
from .schema import Incident, IncidentUpdate
from .scraper_core import StatusPageIncident, _parse_time, store_and_dispatch_incidents
from .stores import Domain
from .types import INCIDENT_IN_PROGRESS, INCIDENT_RESOLVED, INCIDENT_TRIGGERED

_STATE_MAP = {
    "Investigating": INCIDENT_IN_PROGRESS,
    "Identified": INCIDENT_IN_PROGRESS,
    "Monitoring": INCIDENT_IN_PROGRESS,
    "Resolved": INCIDENT_RESOLVED,
}


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _number_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def extract_next_data(html: str) -> Any:
    """Return the JSON document embedded in the page's __NEXT_DATA__ script."""
    soup = BeautifulSoup(html, "html.parser")
    text = "".join(
        str(child)
        for tag in soup.select("script#__NEXT_DATA__")
        for child in tag.contents
        if isinstance(child, NavigableString)
    )
    return json.loads(text)


@dataclass(frozen=True)
class SquadcastProvider:
    """A service whose incidents are read from a Squadcast status web page."""

    incident_url: str
    service_id: int

    def scrap(
        self,
        session: requests.Session,
        domain: Domain,
        queue: Optional[IncidentQueue],
    ) -> list[IncidentUpdate]:
        """Fetch the page, store its incidents and dispatch new updates."""
        response = session.get(self.incident_url)
        document = extract_next_data(response.text) or {}
        page_props = (document.get("props") or {}).get("pageProps") or {}
        history = page_props.get("history") or []
        return store_and_dispatch_incidents(domain, queue, self.normalise_incidents(history))

    def normalise_incidents(
        self, history: Iterable[Mapping[str, Any]]
    ) -> list[StatusPageIncident]:
        """Turn the page's daily history into unique status-page incidents."""
        result: list[StatusPageIncident] = []
        seen: set[str] = set()
        for day in history:
            for issue in day.get("issues") or []:
                incident = Incident(
                    name=_text(issue, "title"),
                    provider_id=_number_text(issue.get("id")),
                    provider_created_at=_parse_time(issue.get("createdAt")),
                    service_id=self.service_id,
                    link=self.incident_url,
                )

                updates: list[IncidentUpdate] = []
                for state in issue.get("states") or []:
                    provider_status = _text(state, "name")
                    for position, message in enumerate(state.get("messages") or []):
                        status = self.normalise_provider_state(provider_status)
                        if position == 0 and provider_status != "Resolved":
                            status = INCIDENT_TRIGGERED
                        updates.append(
                            IncidentUpdate(
                                description=_text(message, "text"),
                                provider_id=_number_text(message.get("id")),
                                status_time=_parse_time(message.get("timestamp")),
                                status=status,
                                provider_status=provider_status,
                            )
                        )

                if incident.provider_id in seen:
                    continue
                seen.add(incident.provider_id)
                result.append(StatusPageIncident(incident=incident, incident_updates=updates))
        return result

    def normalise_provider_state(self, state: str) -> str:
        """Map a Squadcast state name to a normalised status; unknown gives ''."""
        return _STATE_MAP.get(state, "")