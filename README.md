# statuswatch

statuswatch reads the public status pages of the services you depend on,
records their incidents and incident updates, and puts each new update on a
queue for notification workers. It also has request handlers for managing
subscriptions and a dashboard of services that are currently down.

It is a library: you give it storage, and you decide how its pieces are run.

## Installation

Install the package with pip from a checkout or a built wheel. The test
dependencies are in the `test` extra.

## Storage

Every function that reads or writes data takes a `statuswatch.stores.Domain`.
It holds one implementation of each abstract store in `statuswatch.stores`:
`ServiceStore`, `ComponentStore`, `IncidentStore`, `SubscriptionStore`,
`ChatopsExtensionStore`, `SquadcastExtensionStore`, `PagerdutyExtensionStore`
and `WebhookExtensionStore`. A store that expects a row and finds none raises
`statuswatch.stores.NoRowsError`. The records they exchange are the
dataclasses in `statuswatch.schema`.

## Services

Services are declared in YAML, one entry per service:

```yaml
- name: Example Cloud
  link: https://status.example.com
  should_scrap_website: false
  incident_url: https://status.example.com/api/v2/incidents.json
  components_url: https://status.example.com/api/v2/components.json
  provider_type: atlassian
```

`provider_type` is one of `atlassian`, `statusio` or `squadcast`.
`statuswatch.resources.load_service_definitions` parses the file and
`add_and_verify_slugs` gives each service a slug of its name, raising
`ValueError` when two names give the same slug.

`statuswatch.resources.initialize(domain, services_text, session)` stores the
services, fetches the components of Atlassian and status.io services, and
scrapes every page once without queueing anything, so history already on a
page does not cause a burst of notifications. It returns the scrapers that
failed, with their errors.

## Scraping

Each provider type has a scraper with a `scrap(session, domain, queue)`
method:

- `statuswatch.scrape_atlassian.AtlassianProvider` reads a Statuspage
  incidents JSON feed. Updates are stored oldest first.
- `statuswatch.scrape_squadcast.SquadcastProvider` reads the JSON embedded in
  a Squadcast status page.
- `statuswatch.scrape_statusio.StatusioProvider` parses a status.io history
  page. Its `scrap` returns the parsed incidents and does not store or queue
  them.

Provider states are normalised to `triggered`, `in_progress` and `resolved`;
the first update of an incident counts as `triggered` unless it already
closes it.

`statuswatch.scraper.run_scraper(domain, queue, interval_minutes, stop,
session)` builds a scraper for every stored service and, each interval until
the `threading.Event` `stop` is set, scrapes them ten at a time. New incident
updates are published to the `statuswatch.eventqueue.IncidentQueue` as
`IncidentPayload` objects whose `state` is the event type, such as
`incident.triggered`. The queue never blocks: `publish` raises `QueueFull`
and `consume` raises `QueueEmpty`. Updates that do not fit are dropped and
logged.

```python
import threading

import requests

from statuswatch.eventqueue import IncidentQueue
from statuswatch.resources import initialize
from statuswatch.scraper import run_scraper

domain = ...  # a statuswatch.stores.Domain backed by your storage
session = requests.Session()

with open("services.yml", encoding="utf-8") as fh:
    initialize(domain, fh.read(), session)

queue = IncidentQueue(1000)
stop = threading.Event()
threading.Thread(
    target=run_scraper, args=(domain, queue, 5, stop, session), daemon=True
).start()
```

## Notifying Discord

`statuswatch.discord.DiscordWorker(domain, session).do(event)` posts a
`statuswatch.types.WorkerEvent` as an embed to the Discord webhook saved in
the chatops store under the type `discord`. It returns `None` when no Discord
webhook is configured and raises `requests.HTTPError` when the webhook
answers with an error. `build_discord_message(event)` gives the message body
without sending it. The helpers it uses are in `statuswatch.formatting`.

## Request handlers

The handlers take the domain and the parts of a request they need and return
a `statuswatch.api.Response`, whose `status` is the HTTP status and whose
`body()` is the JSON to send (empty for 204).

- `statuswatch.handlers_subscriptions`: `add_subscription`,
  `edit_subscription`, `delete_subscription`, `subscription_by_id`,
  `subscription_incidents`, `services_for_subscriptions` and
  `components_by_service`, with `parse_service_id`, `parse_subscription_id`
  and `parse_pagination` for path and query parameters.
- `statuswatch.handlers_dashboard.dashboard_list` for the paged dashboard
  (`service_name`, `page_number`, `page_limit`).

Successful answers have the shape `{"data": ..., "meta": ...}`; errors have
the shape `{"error_msg": "...", "is_error": true, "status_code": N}`.

## What it does not do

- It has no storage of its own; you supply the store implementations.
- It has no HTTP server or routing; the handlers must be wired into a web
  framework of your choice.
- It has no loop that takes updates off the queue and sends them to workers,
  and nothing that builds a `WorkerEvent` from an incident update; you do
  that with `IncidentQueue.consume` and
  `SubscriptionStore.get_for_incident_updates`.
- Discord is the only notification target. There are no Slack, Microsoft
  Teams, PagerDuty, Squadcast or generic webhook senders, and no handlers
  for saving or reading those integrations.
- There is no command to run.