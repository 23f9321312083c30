"""HTTP handlers for subscriptions, services and components."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union
from uuid import UUID

from .api import Response, ValidationError, errorf, send
from .stores import Domain
from .types import ZERO_TIME

_INTEGER = re.compile(r"[+-]?\d+")


def _int_field(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise TypeError(f"{key} must be a non-negative integer")
    return value


@dataclass
class SaveSubscriptionRequest:
    """Body of a request that creates or edits a subscription."""

    service_id: int = 0
    is_all_components: bool = False
    custom_components: list[int] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "SaveSubscriptionRequest":
        """Build the request from a decoded JSON document."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise TypeError("request body must be a JSON object")
        is_all = data.get("is_all_components")
        if is_all is None:
            is_all = False
        if not isinstance(is_all, bool):
            raise TypeError("is_all_components must be a boolean")
        raw_components = data.get("custom_components")
        if raw_components is None:
            raw_components = []
        if not isinstance(raw_components, list):
            raise TypeError("custom_components must be a list")
        components = [
            _int_field({"component": item}, "component") if item is not None else 0
            for item in raw_components
        ]
        return cls(
            service_id=_int_field(data, "service_id"),
            is_all_components=is_all,
            custom_components=components,
        )

    def validate(self) -> None:
        """Refuse a subscription that names neither all nor any components."""
        if not self.is_all_components and not self.custom_components:
            raise ValidationError("please choose components for the chosen option")


def _decode(body: Union[str, bytes, bytearray]) -> Optional[SaveSubscriptionRequest]:
    """Decode and validate the body; None if it is not a usable JSON document."""
    try:
        data = json.loads(body)
        request = SaveSubscriptionRequest.from_json(data)
    except (ValueError, TypeError):
        return None
    request.validate()
    return request


def _decode_or_error(
    body: Union[str, bytes, bytearray],
) -> tuple[Optional[SaveSubscriptionRequest], Optional[Response]]:
    try:
        request = _decode(body)
    except ValidationError as exc:
        return None, errorf(400, str(exc))
    if request is None:
        return None, errorf(422, "cannot process the given json req")
    return request, None


def parse_pagination(value: Optional[str], default: int) -> int:
    """Parse a page parameter; missing, malformed or too small values give default."""
    if value is None or not _INTEGER.fullmatch(value):
        return default
    number = int(value)
    return default if number < default else number


def parse_service_id(raw: str) -> int:
    """Parse the service id path parameter."""
    if not _INTEGER.fullmatch(raw or "") or int(raw) < 0:
        raise ValueError(f"cannot decode {raw} service ID")
    return int(raw)


def parse_subscription_id(raw: str) -> UUID:
    """Parse the subscription id path parameter."""
    try:
        return UUID(raw)
    except (ValueError, TypeError, AttributeError):
        raise ValueError("cannot parse uuid") from None


def add_subscription(domain: Domain, body: Union[str, bytes, bytearray]) -> Response:
    """Create a subscription from the request body."""
    request, error = _decode_or_error(body)
    if error is not None:
        return error
    try:
        domain.subscription.create(
            request.service_id, request.custom_components, request.is_all_components
        )
    except Exception:
        return errorf(
            500, f"cannot create subscription for {request.service_id} service"
        )
    return send(201, {"msg": "subscription successfully created"}, None)


def edit_subscription(
    domain: Domain, subscription_id: UUID, body: Union[str, bytes, bytearray]
) -> Response:
    """Replace a subscription's component selection."""
    request, error = _decode_or_error(body)
    if error is not None:
        return error
    try:
        domain.subscription.update(
            subscription_id, request.custom_components, request.is_all_components
        )
    except Exception as exc:
        return errorf(
            500, f"cannot update subscription for {subscription_id}, err: {exc}"
        )
    return send(200, {"msg": "subscription successfully updated"}, None)


def delete_subscription(domain: Domain, subscription_id: UUID) -> Response:
    """Delete a subscription."""
    try:
        domain.subscription.delete(subscription_id)
    except Exception as exc:
        return errorf(
            500, f"cannot delete subscription for {subscription_id}, err: {exc}"
        )
    return send(200, {"msg": "subscription successfully deleted"}, None)


def subscription_by_id(domain: Domain, subscription_id: UUID) -> Response:
    """Describe a subscription with every component of its service."""
    try:
        rows = domain.subscription.get_with_components(subscription_id)
    except Exception as exc:
        return errorf(
            500, f"cannot retrieve subscription ID for {subscription_id}, err: {exc}"
        )

    if not rows:
        # A service without components: the subscription covers everything.
        try:
            subscription = domain.subscription.get_by_id(subscription_id)
        except Exception as exc:
            return errorf(
                500,
                f"cannot retrieve subscription ID for {subscription_id}, err: {exc}",
            )
        return send(
            200,
            {
                "service_id": subscription.service_id,
                "service_name": subscription.service_name,
                "uuid": str(subscription_id),
                "is_all_components": True,
                "components": [],
            },
            None,
        )

    components = [
        {"is_configured": row.is_configured, "name": row.component_name, "id": row.component_id}
        for row in rows
    ]
    return send(
        200,
        {
            "service_id": rows[0].service_id,
            "service_name": rows[0].service_name,
            "uuid": str(subscription_id),
            "is_all_components": not any(row.is_configured for row in rows),
            "components": components,
        },
        None,
    )


def subscription_incidents(
    domain: Domain, subscription_id: UUID, query: Mapping[str, str]
) -> Response:
    """List a page of the incidents that concern a subscription."""
    page_number = parse_pagination(query.get("page_number"), 0)
    page_limit = parse_pagination(query.get("page_limit"), 5)

    try:
        rows = domain.subscription.get_incidents_for_subscription(
            subscription_id, page_number * page_limit, page_limit
        )
    except Exception as exc:
        return errorf(
            500,
            f"cannot fetch incidents for the given subscription {subscription_id}, "
            f"err: {exc}",
        )
    if not rows:
        return errorf(
            500,
            f"cannot fetch incidents for the given subscription {subscription_id}, "
            "err: subscription not found",
        )

    first = rows[0]
    incidents: list[dict[str, Any]] = []
    if first.total_count > 0:
        incidents = [
            {
                "id": row.incident_id or 0,
                "last_updated_status_time": row.last_updated_status_time or ZERO_TIME,
                "normalised_status": row.incident_normalised_status or "",
                "status": row.incident_status or "",
                "created_at": row.incident_created_at or ZERO_TIME,
                "name": row.incident_name or "",
                "link": row.incident_link or "",
            }
            for row in rows
        ]

    components: list[dict[str, Any]] = []
    if not first.is_all_components_configured:
        try:
            configured = domain.subscription.get_with_components(subscription_id)
        except Exception as exc:
            return errorf(
                500,
                f"cannot fetch components for the given subscription "
                f"{subscription_id}, err: {exc}",
            )
        components = [
            {"name": row.component_name, "id": row.component_id}
            for row in configured
            if row.is_configured
        ]

    return send(
        200,
        {
            "service_name": first.service_name,
            "service_id": first.service_id,
            "is_all_components_configured": first.is_all_components_configured,
            "components": components,
            "incidents": incidents,
        },
        {
            "total_count": first.total_count,
            "page_number": page_number,
            "page_limit": page_limit,
        },
    )


def services_for_subscriptions(domain: Domain, query: Mapping[str, str]) -> Response:
    """List services matching the name query that have no subscription yet."""
    name_query = (query.get("query") or "").strip()
    try:
        services = domain.subscription.get_all_services_for_subscriptions(name_query)
    except Exception as exc:
        return errorf(500, f"could not fetch services for {name_query} query {exc}")
    return send(
        200,
        [{"id": service.service_id, "name": service.service_name} for service in services],
        None,
    )


def components_by_service(domain: Domain, service_id: int) -> Response:
    """List the components of a service."""
    try:
        components = domain.component.get_all_by_service_id(service_id)
    except Exception:
        return errorf(500, f"could not find components for service {service_id}")
    return send(
        200,
        [{"id": component.id, "name": component.name} for component in components],
        None,
    )