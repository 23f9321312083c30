"""Records stored in and read back from the database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from .types import ZERO_TIME

NIL_UUID = UUID(int=0)


@dataclass(kw_only=True)
class BaseModel:
    """Columns shared by every table."""

    id: int = 0
    created_at: datetime = ZERO_TIME
    updated_at: datetime = ZERO_TIME
    deleted_at: Optional[datetime] = None


@dataclass(kw_only=True)
class Service(BaseModel):
    name: str = ""
    link: str = ""
    slug: str = ""
    provider_type: str = ""
    should_scrap_website: bool = False
    incident_url: str = ""
    schedule_maintenance_url: str = ""
    components_url: str = ""


@dataclass(kw_only=True)
class Component(BaseModel):
    name: str = ""
    service_id: int = 0
    provider_id: str = ""


@dataclass(kw_only=True)
class Incident(BaseModel):
    name: str = ""
    link: str = ""
    provider_impact: Optional[str] = None
    impact: Optional[str] = None
    service_id: int = 0
    provider_id: str = ""
    provider_created_at: datetime = ZERO_TIME


@dataclass(kw_only=True)
class IncidentUpdate(BaseModel):
    incident_id: int = 0
    description: str = ""
    provider_id: str = ""
    status: str = ""
    provider_status: str = ""
    status_time: datetime = ZERO_TIME


@dataclass(kw_only=True)
class IncidentComponent(BaseModel):
    incident_id: int = 0
    component_id: int = 0


@dataclass(kw_only=True)
class LastIncidentUpdateForIncident:
    last_incident_updates_time: Optional[datetime] = None
    incident_id: int = 0


@dataclass(kw_only=True)
class ChatopsExtension(BaseModel):
    uuid: UUID = NIL_UUID
    type: str = ""
    webhook_url: str = ""


@dataclass(kw_only=True)
class PagerdutyExtension(BaseModel):
    uuid: UUID = NIL_UUID
    routing_key: str = ""


@dataclass(kw_only=True)
class SquadcastExtension(BaseModel):
    uuid: UUID = NIL_UUID
    webhook_url: str = ""


@dataclass(kw_only=True)
class WebhookExtension(BaseModel):
    uuid: UUID = NIL_UUID
    webhook_url: str = ""
    secret: Optional[str] = None


@dataclass(kw_only=True)
class Subscription(BaseModel):
    service_id: int = 0
    uuid: UUID = NIL_UUID
    is_all_components: bool = False


@dataclass(kw_only=True)
class ServicesForSubscription:
    service_id: int = 0
    service_name: str = ""


@dataclass(kw_only=True)
class SubscriptionWithComponent:
    service_id: int = 0
    service_name: str = ""
    uuid: Optional[UUID] = None
    component_name: str = ""
    component_id: int = 0
    is_configured: bool = False


@dataclass(kw_only=True)
class SubscriptionWithService:
    service_id: int = 0
    service_name: str = ""
    uuid: Optional[UUID] = None


@dataclass(kw_only=True)
class SubscriptionForIncidentUpdate:
    service_id: int = 0
    service_name: str = ""
    component_id: Optional[int] = None
    component_name: Optional[str] = None
    incident_id: int = 0
    incident_name: str = ""
    incident_link: str = ""
    incident_impact: Optional[str] = None
    incident_update: str = ""
    incident_update_id: int = 0
    incident_update_provider_status: str = ""
    incident_update_status: str = ""
    incident_update_status_time: datetime = ZERO_TIME
    is_all_components: bool = False


@dataclass(kw_only=True)
class DashboardSubscription:
    subscriptions_count: int = 0
    incident_id: Optional[int] = None
    service_id: int = 0
    service_name: str = ""
    subscription_uuid: UUID = NIL_UUID
    incident_name: Optional[str] = None
    incident_link: Optional[str] = None
    incident_impact: Optional[str] = None
    is_down: bool = False


@dataclass(kw_only=True)
class SubscriptionIncident:
    total_count: int = 0
    incident_id: Optional[int] = None
    last_updated_status_time: Optional[datetime] = None
    incident_status: Optional[str] = None
    incident_normalised_status: Optional[str] = None
    incident_created_at: Optional[datetime] = None
    incident_name: Optional[str] = None
    incident_link: Optional[str] = None
    service_id: int = 0
    service_name: str = ""
    is_all_components_configured: bool = False