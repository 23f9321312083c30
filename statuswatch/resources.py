"""Loading services from their definitions and their components from status pages."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

import requests
import yaml
from bs4 import BeautifulSoup
from slugify import slugify

from .schema import Component, Service
from .scraper import Scraper, scrape_during_initialization
from .stores import Domain
from .types import ATLASSIAN_PROVIDER_TYPE, STATUSIO_PROVIDER_TYPE

log = logging.getLogger(__name__)


@dataclass
class ServiceDefinition:
    """One service as described in the services file."""

    name: str = ""
    link: str = ""
    should_scrap_website: bool = False
    incident_url: str = ""
    schedule_maintenance_url: str = ""
    components_url: str = ""
    provider_type: str = ""


_DEFINITION_FIELDS = tuple(f.name for f in dataclasses.fields(ServiceDefinition))


def load_service_definitions(text: str) -> list[ServiceDefinition]:
    """Parse the YAML list of service definitions."""
    data = yaml.safe_load(text)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("services file must hold a list of services")
    definitions: list[ServiceDefinition] = []
    for item in data:
        if not isinstance(item, dict):
            raise ValueError(f"service entry must be a mapping, got {item!r}")
        values = {name: item[name] for name in _DEFINITION_FIELDS if name in item}
        definitions.append(ServiceDefinition(**values))
    return definitions


def add_and_verify_slugs(definitions: Iterable[ServiceDefinition]) -> list[Service]:
    """Build services with slugs of their names, refusing duplicate slugs."""
    services: list[Service] = []
    seen: set[str] = set()
    for definition in definitions:
        slug = slugify(definition.name)
        if slug in seen:
            raise ValueError(
                f"slug already exists for the {definition.name} service, "
                "please change the name"
            )
        seen.add(slug)
        services.append(
            Service(
                name=definition.name,
                slug=slug,
                link=definition.link,
                should_scrap_website=definition.should_scrap_website,
                incident_url=definition.incident_url,
                schedule_maintenance_url=definition.schedule_maintenance_url,
                components_url=definition.components_url,
                provider_type=definition.provider_type,
            )
        )
    return services


def init_services(domain: Domain, text: str) -> list[Service]:
    """Store the services defined in text and return them."""
    services = add_and_verify_slugs(load_service_definitions(text))
    domain.service.create(services)
    return services


def parse_atlassian_components(
    session: requests.Session, service_id: int, url: str
) -> list[Component]:
    """Read a Statuspage components feed, leaving out component groups."""
    response = session.get(url)
    if not response.ok:
        return []
    document = response.json() or {}
    return [
        Component(
            name=item.get("name") or "",
            service_id=service_id,
            provider_id=item.get("id") or "",
        )
        for item in document.get("components") or []
        if not item.get("group")
    ]


def parse_statusio_components(
    session: requests.Session, service_id: int, url: str
) -> list[Component]:
    """Read component names from a Status.io page; ids are slugs of the names."""
    response = session.get(url)
    soup = BeautifulSoup(response.text, "html.parser")
    names = [
        node.get_text().strip()
        for node in soup.select("#statusio_components .component_name")
    ]
    return [
        Component(name=name, provider_id=slugify(name), service_id=service_id)
        for name in names
    ]


_COMPONENT_PARSERS: dict[str, Callable[[requests.Session, int, str], list[Component]]] = {
    ATLASSIAN_PROVIDER_TYPE: parse_atlassian_components,
    STATUSIO_PROVIDER_TYPE: parse_statusio_components,
}


def init_components(
    domain: Domain, session: Optional[requests.Session] = None
) -> list[Component]:
    """Fetch the components of every service that lists them and store them."""
    if session is None:
        session = requests.Session()
    components: list[Component] = []
    for service in domain.service.get_all():
        parser = _COMPONENT_PARSERS.get(service.provider_type)
        if parser is not None:
            components.extend(parser(session, service.id, service.components_url))
    domain.component.create(components)
    return components


def initialize(
    domain: Domain,
    services_text: str,
    session: Optional[requests.Session] = None,
) -> list[tuple[Scraper, BaseException]]:
    """Store services, then their components, then scrape every page once.

    Returns the scrapers that failed, with their errors.
    """
    if session is None:
        session = requests.Session()
    init_services(domain, services_text)
    init_components(domain, session)
    return scrape_during_initialization(domain, session)