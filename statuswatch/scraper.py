"""Running the status-page scrapers for every known service."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from itertools import islice
from typing import Any, Iterable, Iterator, Optional, Protocol, Sequence

import requests

from .eventqueue import IncidentQueue
from .scrape_atlassian import AtlassianProvider
from .scrape_squadcast import SquadcastProvider
from .scrape_statusio import StatusioProvider
from .stores import Domain
from .types import (
    ATLASSIAN_PROVIDER_TYPE,
    SQUADCAST_PROVIDER_TYPE,
    STATUSIO_PROVIDER_TYPE,
)

log = logging.getLogger(__name__)

WORKER_COUNT = 10

_PROVIDERS = {
    ATLASSIAN_PROVIDER_TYPE: AtlassianProvider,
    SQUADCAST_PROVIDER_TYPE: SquadcastProvider,
    STATUSIO_PROVIDER_TYPE: StatusioProvider,
}


class Scraper(Protocol):
    """Anything that can scrape one service's status page."""

    def scrap(
        self,
        session: requests.Session,
        domain: Domain,
        queue: Optional[IncidentQueue],
    ) -> Any:
        """Scrape the page, store what is new and dispatch it when a queue is given."""


def get_services(domain: Domain) -> list[Scraper]:
    """Build a scraper for each stored service with a known provider type."""
    scrapers: list[Scraper] = []
    for service in domain.service.get_all():
        provider = _PROVIDERS.get(service.provider_type)
        if provider is not None:
            scrapers.append(
                provider(incident_url=service.incident_url, service_id=service.id)
            )
    return scrapers


def _batches(items: Iterable[Scraper], size: int) -> Iterator[list[Scraper]]:
    iterator = iter(items)
    while batch := list(islice(iterator, size)):
        yield batch


def scrape_once(
    providers: Iterable[Scraper],
    session: requests.Session,
    domain: Domain,
    queue: Optional[IncidentQueue],
) -> list[tuple[Scraper, BaseException]]:
    """Scrape every provider, at most WORKER_COUNT at a time; return the failures."""
    failures: list[tuple[Scraper, BaseException]] = []
    for batch in _batches(providers, WORKER_COUNT):
        with ThreadPoolExecutor(max_workers=len(batch)) as pool:
            futures = [
                (provider, pool.submit(provider.scrap, session, domain, queue))
                for provider in batch
            ]
        for provider, future in futures:
            error = future.exception()
            if error is not None:
                log.error("error while scraping %r: %s", provider, error)
                failures.append((provider, error))
    return failures


def scrape_during_initialization(
    domain: Domain, session: Optional[requests.Session] = None
) -> list[tuple[Scraper, BaseException]]:
    """Scrape every service once without dispatching; return the failures."""
    providers = get_services(domain)
    if session is None:
        session = requests.Session()
    return scrape_once(providers, session, domain, None)


def run_scraper(
    domain: Domain,
    queue: Optional[IncidentQueue],
    interval_minutes: float,
    stop: threading.Event,
    session: Optional[requests.Session] = None,
) -> None:
    """Scrape every service each interval until stop is set."""
    providers: Sequence[Scraper] = get_services(domain)
    if session is None:
        session = requests.Session()
    while not stop.wait(interval_minutes * 60):
        scrape_once(providers, session, domain, queue)