"""Posting incident updates to a Discord webhook."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .formatting import components_to_str, rfc822, title_case
from .stores import Domain, NoRowsError
from .types import (
    DISCORD_WORKER,
    INCIDENT_IN_PROGRESS_EVENT_TYPE,
    INCIDENT_RESOLVED_EVENT_TYPE,
    INCIDENT_TRIGGERED_EVENT_TYPE,
    WorkerEvent,
)

log = logging.getLogger(__name__)

MESSAGE_COLORS = {
    INCIDENT_TRIGGERED_EVENT_TYPE: 16729344,
    INCIDENT_IN_PROGRESS_EVENT_TYPE: 16776960,
    INCIDENT_RESOLVED_EVENT_TYPE: 5763719,
}


def _field(name: str, value: str, inline: bool = False) -> dict[str, Any]:
    field: dict[str, Any] = {"name": name, "value": value}
    if inline:
        field["inline"] = True
    return field


def build_discord_message(event: WorkerEvent) -> dict[str, Any]:
    """Build the webhook message with one embed describing the update."""
    fields = [
        _field("Service", event.service_name, True),
        _field("Incident Status", title_case(event.incident_update_provider_status), True),
    ]
    if event.incident_impact:
        fields.append(_field("Incident Impact", title_case(event.incident_impact), True))
    fields.extend(
        [
            _field("Created At", rfc822(event.incident_update_status_time), True),
            _field("Affected Components", components_to_str(event.components)),
            _field("Description", event.incident_update),
        ]
    )

    embed: dict[str, Any] = {"title": f":rotating_light: **{event.incident_name}**"}
    if event.incident_link:
        embed["url"] = event.incident_link
    color = MESSAGE_COLORS.get(event.event_type, 0)
    if color:
        embed["color"] = color
    embed["fields"] = fields
    return {"embeds": [embed]}


def dispatch_discord_message(
    domain: Domain, session: requests.Session, event: WorkerEvent
) -> Optional[requests.Response]:
    """Post the update to the configured Discord webhook; None if none is set up."""
    try:
        extension = domain.chatops_extension.get_by_type(DISCORD_WORKER)
    except NoRowsError:
        return None

    response = session.post(extension.webhook_url, json=build_discord_message(event))
    if response.status_code >= 400:
        raise requests.HTTPError(
            f"discord webhook failed with status code: {response.status_code} "
            f"and error: {response.text}",
            response=response,
        )
    return response


@dataclass
class DiscordWorker:
    """Sends every incident event to Discord."""

    domain: Domain
    session: Optional[requests.Session] = None

    def do(self, event: WorkerEvent) -> Optional[requests.Response]:
        return dispatch_discord_message(
            self.domain, self.session or requests.Session(), event
        )