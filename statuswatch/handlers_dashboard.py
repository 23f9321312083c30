"""HTTP handler for the dashboard of subscribed services."""

from __future__ import annotations

from typing import Any, Mapping

from .api import Response, errorf, send
from .handlers_subscriptions import parse_pagination
from .stores import Domain


def dashboard_list(domain: Domain, query: Mapping[str, str]) -> Response:
    """List a page of subscriptions with the latest open incident of each."""
    service_name = query.get("service_name") or ""
    page_number = parse_pagination(query.get("page_number"), 0)
    page_limit = parse_pagination(query.get("page_limit"), 5)

    try:
        rows = domain.subscription.dashboard_subscription(
            service_name, page_number * page_limit, page_limit
        )
    except Exception as exc:
        return errorf(500, str(exc))

    meta: dict[str, Any] = {"page_number": page_number, "page_limit": page_limit}
    if not rows:
        meta["total_count"] = 0
        return send(200, [], meta)

    items = [
        {
            "incident_id": row.incident_id or 0,
            "service_id": row.service_id,
            "service_name": row.service_name,
            "subscription_uuid": str(row.subscription_uuid),
            "incident_name": row.incident_name or "",
            "incident_link": row.incident_link or "",
            "incident_impact": row.incident_impact or "",
            "is_down": bool(row.is_down),
        }
        for row in rows
    ]
    meta["total_count"] = rows[0].subscriptions_count
    return send(200, items, meta)