"""Storage interfaces and the container that holds the active stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence
from uuid import UUID

from .schema import (
    ChatopsExtension,
    Component,
    DashboardSubscription,
    Incident,
    IncidentComponent,
    IncidentUpdate,
    PagerdutyExtension,
    Service,
    ServicesForSubscription,
    SquadcastExtension,
    SubscriptionForIncidentUpdate,
    SubscriptionIncident,
    SubscriptionWithComponent,
    SubscriptionWithService,
    WebhookExtension,
)


class NoRowsError(LookupError):
    """Raised when a query expected to return a row returned none."""

    def __init__(self, message: str = "no rows in result set") -> None:
        super().__init__(message)


class ServiceStore(ABC):
    @abstractmethod
    def create(self, services: Sequence[Service]) -> None:
        """Insert services, skipping any whose slug already exists."""

    @abstractmethod
    def get_all(self) -> list[Service]:
        """Return every service that is not deleted."""


class ComponentStore(ABC):
    @abstractmethod
    def create(self, components: Sequence[Component]) -> list[Component]:
        """Insert components and return the ones actually inserted."""

    @abstractmethod
    def get_all_by_service_id(self, service_id: int) -> list[Component]:
        """Return the components of one service."""


class IncidentStore(ABC):
    @abstractmethod
    def create(self, incidents: Sequence[Incident]) -> list[Incident]:
        """Insert incidents and return them with their ids."""

    @abstractmethod
    def get_by_provider_ids(self, provider_ids: Sequence[str]) -> list[Incident]:
        """Return stored incidents whose provider id is in the given list."""

    @abstractmethod
    def create_incident_updates(
        self, incident_updates: Sequence[IncidentUpdate]
    ) -> list[IncidentUpdate]:
        """Insert incident updates and return them with their ids."""

    @abstractmethod
    def create_incident_components(
        self, incident_components: Sequence[IncidentComponent]
    ) -> None:
        """Link incidents to components, ignoring existing links."""

    @abstractmethod
    def get_incident_updates_by_provider_ids(
        self, provider_ids: Sequence[str]
    ) -> list[IncidentUpdate]:
        """Return stored updates whose provider id is in the given list."""


class SubscriptionStore(ABC):
    @abstractmethod
    def get_all_services_for_subscriptions(
        self, service_name: str
    ) -> list[ServicesForSubscription]:
        """Return up to five unsubscribed services matching the name."""

    @abstractmethod
    def create(
        self, service_id: int, component_ids: Sequence[int], is_all_components: bool
    ) -> None:
        """Subscribe to a service, for all or some of its components."""

    @abstractmethod
    def get_by_id(self, subscription_id: UUID) -> SubscriptionWithService:
        """Return one subscription with its service; NoRowsError if absent."""

    @abstractmethod
    def get_with_components(
        self, subscription_id: UUID
    ) -> list[SubscriptionWithComponent]:
        """Return the service's components, marking the subscribed ones."""

    @abstractmethod
    def update(
        self, subscription_id: UUID, component_ids: Sequence[int], is_all_components: bool
    ) -> None:
        """Replace a subscription's component selection."""

    @abstractmethod
    def get_for_incident_updates(
        self, incident_update_id: int
    ) -> list[SubscriptionForIncidentUpdate]:
        """Return subscription rows that an incident update concerns."""

    @abstractmethod
    def dashboard_subscription(
        self, service_name: str, offset: int, limit: int
    ) -> list[DashboardSubscription]:
        """Return one page of subscriptions with their latest open incident."""

    @abstractmethod
    def get_incidents_for_subscription(
        self, subscription_id: UUID, offset: int, limit: int
    ) -> list[SubscriptionIncident]:
        """Return one page of incidents relevant to a subscription."""

    @abstractmethod
    def delete(self, subscription_id: UUID) -> None:
        """Soft-delete a subscription and its component links."""


class SquadcastExtensionStore(ABC):
    @abstractmethod
    def get(self) -> SquadcastExtension:
        """Return the configuration; NoRowsError if none."""

    @abstractmethod
    def save(self, webhook_url: str, uuid: UUID) -> None:
        """Insert or update the configuration identified by uuid."""

    @abstractmethod
    def delete(self, uuid: UUID) -> None:
        """Soft-delete the configuration identified by uuid."""


class PagerdutyExtensionStore(ABC):
    @abstractmethod
    def get(self) -> PagerdutyExtension:
        """Return the configuration; NoRowsError if none."""

    @abstractmethod
    def save(self, routing_key: str, uuid: UUID) -> None:
        """Insert or update the configuration identified by uuid."""

    @abstractmethod
    def delete(self, uuid: UUID) -> None:
        """Soft-delete the configuration identified by uuid."""


class ChatopsExtensionStore(ABC):
    @abstractmethod
    def get(self) -> list[ChatopsExtension]:
        """Return every configured chat integration."""

    @abstractmethod
    def get_by_type(self, chatops_type: str) -> ChatopsExtension:
        """Return the integration of one type; NoRowsError if none."""

    @abstractmethod
    def save(self, chatops_type: str, webhook_url: str, uuid: UUID) -> None:
        """Insert or update the integration identified by uuid."""

    @abstractmethod
    def delete(self, uuid: UUID) -> None:
        """Soft-delete the integration identified by uuid."""


class WebhookExtensionStore(ABC):
    @abstractmethod
    def get(self) -> WebhookExtension:
        """Return the configuration; NoRowsError if none."""

    @abstractmethod
    def save(self, webhook_url: str, secret: Optional[str], uuid: UUID) -> None:
        """Insert or update the configuration identified by uuid."""

    @abstractmethod
    def delete(self, uuid: UUID) -> None:
        """Soft-delete the configuration identified by uuid."""


@dataclass
class Domain:
    """The set of stores the application works against."""

    incident: Optional[IncidentStore] = None
    component: Optional[ComponentStore] = None
    service: Optional[ServiceStore] = None
    subscription: Optional[SubscriptionStore] = None
    chatops_extension: Optional[ChatopsExtensionStore] = None
    squadcast_extension: Optional[SquadcastExtensionStore] = None
    pagerduty_extension: Optional[PagerdutyExtensionStore] = None
    webhook_extension: Optional[WebhookExtensionStore] = None