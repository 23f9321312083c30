import json
from types import SimpleNamespace
from uuid import uuid4

import pytest

from statuswatch.api import ValidationError
from statuswatch.handlers_subscriptions import (
    SaveSubscriptionRequest,
    add_subscription,
    components_by_service,
    delete_subscription,
    edit_subscription,
    parse_pagination,
    parse_service_id,
    parse_subscription_id,
    services_for_subscriptions,
    subscription_by_id,
    subscription_incidents,
)
from statuswatch.schema import (
    Component,
    ServicesForSubscription,
    SubscriptionIncident,
    SubscriptionWithComponent,
    SubscriptionWithService,
)


class FakeSubscriptions:
    def __init__(self, fail=False, components=(), incidents=(), by_id=None, services=()):
        self.fail = fail
        self.components = list(components)
        self.incidents = list(incidents)
        self.by_id = by_id
        self.services = list(services)
        self.calls = []

    def _check(self):
        if self.fail:
            raise RuntimeError("database down")

    def create(self, service_id, component_ids, is_all_components):
        self._check()
        self.calls.append(("create", service_id, component_ids, is_all_components))

    def update(self, subscription_id, component_ids, is_all_components):
        self._check()
        self.calls.append(("update", subscription_id, component_ids, is_all_components))

    def delete(self, subscription_id):
        self._check()
        self.calls.append(("delete", subscription_id))

    def get_with_components(self, subscription_id):
        self._check()
        return self.components

    def get_by_id(self, subscription_id):
        self._check()
        return self.by_id

    def get_incidents_for_subscription(self, subscription_id, offset, limit):
        self._check()
        self.calls.append(("incidents", subscription_id, offset, limit))
        return self.incidents

    def get_all_services_for_subscriptions(self, service_name):
        self._check()
        self.calls.append(("services", service_name))
        return self.services


class FakeComponents:
    def __init__(self, components=(), fail=False):
        self.components = list(components)
        self.fail = fail

    def get_all_by_service_id(self, service_id):
        if self.fail:
            raise RuntimeError("database down")
        return self.components


def domain_with(subscriptions=None, components=None):
    return SimpleNamespace(
        subscription=subscriptions or FakeSubscriptions(),
        component=components or FakeComponents(),
    )


@pytest.mark.parametrize(
    "value, default, expected",
    [("", 0, 0), (None, 5, 5), ("abc", 5, 5), ("3", 5, 5), ("7", 5, 7), (" 7", 0, 0)],
)
def test_parse_pagination(value, default, expected):
    assert parse_pagination(value, default) == expected


def test_parse_service_id():
    assert parse_service_id("12") == 12
    with pytest.raises(ValueError, match="service ID"):
        parse_service_id("abc")


def test_parse_subscription_id_round_trip():
    value = uuid4()
    assert parse_subscription_id(str(value)) == value
    with pytest.raises(ValueError, match="cannot parse uuid"):
        parse_subscription_id("not-a-uuid")


def test_request_validation():
    with pytest.raises(ValidationError):
        SaveSubscriptionRequest(service_id=1).validate()
    request = SaveSubscriptionRequest.from_json(
        {"service_id": 1, "custom_components": [4, 5]}
    )
    assert request.custom_components == [4, 5]
    request.validate()


def test_add_subscription_creates():
    subscriptions = FakeSubscriptions()
    body = json.dumps({"service_id": 2, "is_all_components": False, "custom_components": [1]})
    response = add_subscription(domain_with(subscriptions), body)
    assert response.status == 201
    assert response.data["data"] == {"msg": "subscription successfully created"}
    assert subscriptions.calls == [("create", 2, [1], False)]


def test_add_subscription_validation_error():
    subscriptions = FakeSubscriptions()
    response = add_subscription(domain_with(subscriptions), json.dumps({"service_id": 2}))
    assert response.status == 400
    assert "please choose components" in response.data["error_msg"]
    assert subscriptions.calls == []


def test_add_subscription_bad_json():
    response = add_subscription(domain_with(), b"{not json")
    assert response.status == 422
    assert response.data["error_msg"] == "cannot process the given json req"


def test_add_subscription_store_failure():
    body = json.dumps({"service_id": 2, "is_all_components": True})
    response = add_subscription(domain_with(FakeSubscriptions(fail=True)), body)
    assert response.status == 500
    assert response.data["is_error"] is True


def test_edit_subscription_updates():
    subscriptions = FakeSubscriptions()
    subscription_id = uuid4()
    body = json.dumps({"is_all_components": True})
    response = edit_subscription(domain_with(subscriptions), subscription_id, body)
    assert response.status == 200
    assert subscriptions.calls == [("update", subscription_id, [], True)]


def test_delete_subscription_failure_reports_id():
    subscription_id = uuid4()
    response = delete_subscription(domain_with(FakeSubscriptions(fail=True)), subscription_id)
    assert response.status == 500
    assert str(subscription_id) in response.data["error_msg"]


def test_subscription_by_id_without_components():
    subscription_id = uuid4()
    subscriptions = FakeSubscriptions(
        by_id=SubscriptionWithService(service_id=3, service_name="Example")
    )
    data = subscription_by_id(domain_with(subscriptions), subscription_id).data["data"]
    assert data["is_all_components"] is True
    assert data["components"] == []
    assert data["uuid"] == str(subscription_id)


def test_subscription_by_id_with_configured_component():
    rows = [
        SubscriptionWithComponent(service_id=3, service_name="Example", component_id=1,
                                  component_name="API", is_configured=True),
        SubscriptionWithComponent(service_id=3, service_name="Example", component_id=2,
                                  component_name="Web", is_configured=False),
    ]
    data = subscription_by_id(domain_with(FakeSubscriptions(components=rows)), uuid4()).data["data"]
    assert data["is_all_components"] is False
    assert [c["id"] for c in data["components"]] == [1, 2]


def test_subscription_incidents_paginates_and_filters_components():
    subscription_id = uuid4()
    rows = [SubscriptionIncident(total_count=1, incident_id=8, incident_name="Outage",
                                 service_id=3, service_name="Example",
                                 is_all_components_configured=False)]
    components = [
        SubscriptionWithComponent(component_id=1, component_name="API", is_configured=True),
        SubscriptionWithComponent(component_id=2, component_name="Web", is_configured=False),
    ]
    subscriptions = FakeSubscriptions(incidents=rows, components=components)
    response = subscription_incidents(
        domain_with(subscriptions), subscription_id, {"page_number": "1", "page_limit": "10"}
    )
    assert subscriptions.calls == [("incidents", subscription_id, 10, 10)]
    assert response.data["meta"]["page_limit"] == 10
    data = response.data["data"]
    assert data["components"] == [{"name": "API", "id": 1}]
    assert [i["id"] for i in data["incidents"]] == [8]


def test_subscription_incidents_without_incidents():
    rows = [SubscriptionIncident(total_count=0, service_id=3, service_name="Example",
                                 is_all_components_configured=True)]
    response = subscription_incidents(
        domain_with(FakeSubscriptions(incidents=rows)), uuid4(), {}
    )
    assert response.data["data"]["incidents"] == []
    assert response.data["meta"]["page_number"] == 0


def test_services_for_subscriptions_strips_query():
    subscriptions = FakeSubscriptions(
        services=[ServicesForSubscription(service_id=4, service_name="Example")]
    )
    response = services_for_subscriptions(domain_with(subscriptions), {"query": "  exa "})
    assert subscriptions.calls == [("services", "exa")]
    assert response.data["data"] == [{"id": 4, "name": "Example"}]


def test_components_by_service():
    components = FakeComponents([Component(id=6, name="API")])
    response = components_by_service(domain_with(components=components), 3)
    assert response.data["data"] == [{"id": 6, "name": "API"}]
    failing = components_by_service(domain_with(components=FakeComponents(fail=True)), 3)
    assert failing.status == 500