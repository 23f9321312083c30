"""Scraping incidents from Status.io history pages."""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import urlsplit
from zoneinfo import ZoneInfo

import requests
from bs4 import BeautifulSoup, Tag
from slugify import slugify

from .eventqueue import IncidentQueue
from .schema import Incident, IncidentUpdate
from .scraper_core import StatusPageIncident, StatusPageIncidentComponent
from .stores import Domain
from .types import (
    INCIDENT_IN_PROGRESS,
    INCIDENT_RESOLVED,
    INCIDENT_TRIGGERED,
    ZERO_TIME,
)

log = logging.getLogger(__name__)

INCIDENT_COMPONENTS_HEADER = "Components"
PLANNED_MAINTENANCE = "Planned Maintenance"
BREAK_DELIMITER = "<br/>"
TIME_FORMAT = "%B %d, %Y %I:%M%p"

_STATE_MAP = {
    "Investigating": INCIDENT_IN_PROGRESS,
    "Identified": INCIDENT_IN_PROGRESS,
    "Monitoring": INCIDENT_IN_PROGRESS,
    "Resolved": INCIDENT_RESOLVED,
}

TIMEZONE_ABBREVIATIONS = {
    "SST": "Pacific/Midway",
    "HST": "Pacific/Honolulu",
    "AKST": "America/Anchorage",
    "PST": "America/Los_Angeles",
    "PDT": "America/Los_Angeles",
    "MST": "America/Denver",
    "CST": "America/Chicago",
    "EST": "America/New_York",
    "-04": "America/Caracas",
    "-03": "America/Santiago",
    "-02": "America/Noronha",
    "-01": "Atlantic/Cape_Verde",
    "UTC": "UTC",
    "GMT": "Europe/London",
    "CET": "Europe/Brussels",
    "EET": "Africa/Cairo",
    "SAST": "Africa/Johannesburg",
    "MSK": "Europe/Moscow",
    "+0330": "Asia/Tehran",
    "+04": "Asia/Baku",
    "+0430": "Asia/Kabul",
    "+05": "Asia/Tashkent",
    "IST": "Asia/Kolkata",
    "+0530": "Asia/Colombo",
    "+0545": "Asia/Kathmandu",
    "+0630": "Indian/Cocos",
    "+07": "Asia/Bangkok",
    "+08": "Asia/Singapore",
    "KST": "Asia/Seoul",
    "JST": "Asia/Tokyo",
    "ACST": "Australia/Darwin",
    "ChST": "Pacific/Guam",
    "AEST": "Australia/Brisbane",
    "AEDT": "Australia/Melbourne",
    "+11": "Australia/Lord_Howe",
    "+12": "Pacific/Fiji",
    "NZDT": "Pacific/Auckland",
    "+1345": "Pacific/Chatham",
    "+13": "Pacific/Tongatapu",
}

_EDGE_NOISE = re.compile(r"^[\[\]\s]+|[\[\]\s]+$")


def _joined_text(elements: Iterable[Tag]) -> str:
    return "".join(element.get_text() for element in elements)


def _siblings(elements: list[Tag]) -> list[Tag]:
    found: list[Tag] = []
    for element in elements:
        parent = element.parent
        if parent is None:
            continue
        for sibling in parent.find_all(recursive=False):
            if sibling is element or any(sibling is seen for seen in found):
                continue
            found.append(sibling)
    return found


def _join_url(origin: str, link: str) -> str:
    cleaned = posixpath.normpath(re.sub(r"/+", "/", "/" + link))
    path = "" if cleaned == "/" else cleaned
    if link.endswith("/") and not path.endswith("/"):
        path += "/"
    return origin + path


@dataclass(frozen=True)
class StatusioProvider:
    """A service whose incidents are read from a Status.io history page."""

    incident_url: str
    service_id: int

    def scrap(
        self,
        session: requests.Session,
        domain: Domain,
        queue: Optional[IncidentQueue],
    ) -> list[StatusPageIncident]:
        """Fetch and parse the history page.

        The parsed incidents are returned; they are not stored or dispatched.
        """
        response = session.get(self.incident_url)
        return self.parse_incidents(response.text)

    def parse_incidents(self, html: str) -> list[StatusPageIncident]:
        """Extract the incidents, with updates and components, from page HTML."""
        parts = urlsplit(self.incident_url)
        origin = f"{parts.scheme}://{parts.netloc}"
        soup = BeautifulSoup(html, "html.parser")
        result: list[StatusPageIncident] = []

        for block in soup.select(".timelineMinor"):
            event_status = _joined_text(block.select(".pull-right.status_description"))
            if event_status in (PLANNED_MAINTENANCE, ""):
                continue

            title_nodes = block.select(".panel-title a")
            title = _joined_text(title_nodes).strip()
            link = title_nodes[0].get("href", "") if title_nodes else ""
            link_path = _join_url(origin, link.strip())
            slash = link.rfind("/")
            provider_id = link[slash + 1:] if slash != -1 else ""

            component_names: list[str] = []
            updates: list[IncidentUpdate] = []
            children = [
                child
                for body in block.select(".panel > .panel-body")
                for child in body.children
                if isinstance(child, Tag)
            ]
            for position, child in enumerate(children):
                entity = _joined_text(child.select(".event_inner_title")).strip()
                entity_value = _joined_text(child.select(".event_inner_text")).strip()
                if entity == INCIDENT_COMPONENTS_HEADER:
                    component_names = self.trim_spaces(entity_value.strip().split(","))

                time_nodes = child.select(".incident_time")
                time_html = time_nodes[0].decode_contents() if time_nodes else ""
                time_text = ""
                if BREAK_DELIMITER in time_html:
                    time_text = time_html.split(BREAK_DELIMITER, 1)[0]

                status_time = ZERO_TIME
                if time_text:
                    try:
                        status_time = self.get_time_in_utc(time_text)
                    except (ValueError, LookupError) as exc:
                        log.warning("cannot parse incident time %r: %s", time_text, exc)

                messages = child.select(".incident_message_details")
                message_id = messages[0].get("id", "") if messages else ""
                message = _joined_text(messages)
                provider_status = self.format_incident_msg_status(
                    _joined_text(_siblings(messages))
                )

                if status_time != ZERO_TIME:
                    status = self.normalise_provider_state(provider_status)
                    if position == 0 and provider_status != "Resolved":
                        status = INCIDENT_TRIGGERED
                    updates.append(
                        IncidentUpdate(
                            description=message,
                            status=status,
                            status_time=status_time,
                            provider_id=message_id,
                            provider_status=provider_status,
                        )
                    )

            if not updates:
                continue
            incident = Incident(
                name=title,
                link=link_path,
                service_id=self.service_id,
                provider_id=provider_id,
                provider_created_at=updates[0].status_time,
                provider_impact=event_status,
                impact=event_status,
            )
            result.append(
                StatusPageIncident(
                    incident=incident,
                    incident_updates=updates,
                    incident_components=self.components_from_names(component_names),
                )
            )
        return result

    def components_from_names(
        self, names: Iterable[str]
    ) -> list[StatusPageIncidentComponent]:
        """Build components whose provider id is a slug of the name."""
        return [
            StatusPageIncidentComponent(
                component_name=name, provider_component_id=slugify(name)
            )
            for name in names
        ]

    def get_time_in_utc(self, text: str) -> datetime:
        """Parse 'January 2, 2006 3:04PM TZ' into an aware UTC datetime."""
        daytime = "PM" if "PM" in text else "AM"
        cut = text.find(daytime) + len(daytime)
        without_zone = text[:cut].strip()
        abbr = text[cut:].strip()
        zone = ZoneInfo(self.timezone_for_abbr(abbr))
        naive = datetime.strptime(without_zone, TIME_FORMAT)
        return naive.replace(tzinfo=zone).astimezone(timezone.utc)

    def normalise_provider_state(self, state: str) -> str:
        """Map a Status.io state name to a normalised status; unknown gives ''."""
        return _STATE_MAP.get(state, "")

    def trim_spaces(self, items: Iterable[str]) -> list[str]:
        """Strip every item and drop the empty ones."""
        return [item.strip() for item in items if item.strip()]

    def format_incident_msg_status(self, text: str) -> str:
        """Remove surrounding brackets and whitespace and lower-case the status."""
        return _EDGE_NOISE.sub("", text).lower()

    def timezone_for_abbr(self, abbr: str) -> str:
        """Return the zone name for a Status.io timezone abbreviation."""
        try:
            return TIMEZONE_ABBREVIATIONS[abbr]
        except KeyError:
            raise LookupError(
                f"can find timezone name for the given abbr {abbr}"
            ) from None