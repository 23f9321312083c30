from datetime import datetime, timezone

import pytest
import requests
import responses

from statuswatch.scrape_statusio import StatusioProvider
from statuswatch.stores import Domain
from statuswatch.types import INCIDENT_RESOLVED, INCIDENT_TRIGGERED

URL = "https://status.example.com/pages/history/123"

PAGE = """
<html><body>
<div class="timelineMinor">
  <div class="panel">
    <div class="panel-heading">
      <h4 class="panel-title"><a href="/pages/incident/abc/inc123">  API outage  </a></h4>
      <span class="pull-right status_description">Major Outage</span>
    </div>
    <div class="panel-body">
      <div class="row">
        <div class="event_inner_title">Components</div>
        <div class="event_inner_text">API, Web App ,</div>
        <div class="incident_time">January 5, 2024 10:30AM EST<br>Posted</div>
        <div><span>[Investigating]</span><div class="incident_message_details" id="msg1">We are looking</div></div>
      </div>
      <div class="row">
        <div class="incident_time">January 5, 2024 1:15PM EST<br>Posted</div>
        <div><span>[Resolved]</span><div class="incident_message_details" id="msg2">Fixed</div></div>
      </div>
    </div>
  </div>
</div>
<div class="timelineMinor">
  <div class="panel">
    <h4 class="panel-title"><a href="/pages/maintenance/abc/m1">Upgrade</a></h4>
    <span class="pull-right status_description">Planned Maintenance</span>
    <div class="panel-body">
      <div class="row"><div class="incident_time">January 6, 2024 1:15PM EST<br>x</div></div>
    </div>
  </div>
</div>
<div class="timelineMinor">
  <div class="panel">
    <h4 class="panel-title"><a href="/pages/incident/abc/inc999">No times</a></h4>
    <span class="pull-right status_description">Minor</span>
    <div class="panel-body">
      <div class="row"><div class="incident_time">no break here</div></div>
    </div>
  </div>
</div>
</body></html>
"""


@pytest.fixture
def provider():
    return StatusioProvider(incident_url=URL, service_id=4)


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_only_real_incidents_with_updates_are_kept(provider):
    incidents = provider.parse_incidents(PAGE)
    assert [item.incident.provider_id for item in incidents] == ["inc123"]


def test_incident_fields(provider):
    incident = provider.parse_incidents(PAGE)[0].incident
    assert incident.name == "API outage"
    assert incident.link == "https://status.example.com/pages/incident/abc/inc123"
    assert incident.impact == "Major Outage"
    assert incident.provider_impact == "Major Outage"
    assert incident.service_id == 4


def test_updates_in_page_order(provider):
    updates = provider.parse_incidents(PAGE)[0].incident_updates
    assert [u.provider_id for u in updates] == ["msg1", "msg2"]
    assert [u.description for u in updates] == ["We are looking", "Fixed"]
    assert [u.provider_status for u in updates] == ["investigating", "resolved"]
    assert updates[0].status == INCIDENT_TRIGGERED


def test_update_time_is_converted_to_utc(provider):
    item = provider.parse_incidents(PAGE)[0]
    first = item.incident_updates[0].status_time
    assert first == datetime(2024, 1, 5, 15, 30, tzinfo=timezone.utc)
    assert item.incident.provider_created_at == first
    assert item.incident_updates[1].status_time > first


def test_components_are_slugged(provider):
    components = provider.parse_incidents(PAGE)[0].incident_components
    assert [c.component_name for c in components] == ["API", "Web App"]
    assert [c.provider_component_id for c in components] == ["api", "web-app"]


def test_get_time_in_utc_with_utc_zone(provider):
    assert provider.get_time_in_utc("March 3, 2024 11:05AM UTC") == datetime(
        2024, 3, 3, 11, 5, tzinfo=timezone.utc
    )


def test_get_time_unknown_abbreviation(provider):
    with pytest.raises(LookupError, match="XYZ"):
        provider.get_time_in_utc("March 3, 2024 11:05AM XYZ")


def test_get_time_bad_format(provider):
    with pytest.raises(ValueError):
        provider.get_time_in_utc("not a date PM UTC")


def test_timezone_for_abbr(provider):
    assert provider.timezone_for_abbr("IST") == "Asia/Kolkata"
    assert provider.timezone_for_abbr("PDT") == "America/Los_Angeles"


def test_format_incident_msg_status(provider):
    assert provider.format_incident_msg_status(" [Monitoring] \n") == "monitoring"


def test_trim_spaces(provider):
    assert provider.trim_spaces([" a ", "  ", "b"]) == ["a", "b"]


def test_normalise_provider_state(provider):
    assert provider.normalise_provider_state("Resolved") == INCIDENT_RESOLVED
    assert provider.normalise_provider_state("resolved") == ""


def test_scrap_fetches_and_parses(provider, mocked):
    mocked.add(responses.GET, URL, body=PAGE, status=200)
    result = provider.scrap(requests.Session(), Domain(), None)
    assert result == provider.parse_incidents(PAGE)
    assert len(mocked.calls) == 1