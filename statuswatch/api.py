"""Request decoding and JSON response building for the HTTP API."""

from __future__ import annotations

import dataclasses
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, ClassVar, TypeVar, Union
from uuid import UUID

T = TypeVar("T")

_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class ValidationError(ValueError):
    """A request body was well-formed but failed validation."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"validation err: {detail}")
        self.detail = detail


class DecodeError(ValueError):
    """A request body could not be decoded into the expected shape."""


def decode(raw: Union[str, bytes], factory: Callable[[Any], T]) -> T:
    """Parse the first JSON value in raw, build an object and validate it."""
    try:
        text = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        data, _ = json.JSONDecoder().raw_decode(text.lstrip())
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(str(exc)) from exc
    try:
        obj = factory(data)
    except ValidationError:
        raise
    except (TypeError, ValueError, KeyError, AttributeError) as exc:
        raise DecodeError(str(exc)) from exc
    validate = getattr(obj, "validate", None)
    if callable(validate):
        validate()
    return obj


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if moment.microsecond:
        text += f".{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "+" if offset > timedelta(0) else "-"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, UUID):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


@dataclasses.dataclass
class Response:
    """An HTTP status with the data to be sent as its JSON body."""

    content_type: ClassVar[str] = "application/json"

    status: int
    data: Any
    is_error: bool = False

    def body(self) -> bytes:
        """Encode the data as a JSON line; empty for 204 No Content."""
        if self.status == 204:
            return b""
        text = json.dumps(
            self.data, default=_default, ensure_ascii=False, separators=(",", ":")
        )
        for char, escaped in _ESCAPES.items():
            text = text.replace(char, escaped)
        return (text + "\n").encode("utf-8")


def send(status: int, data: Any, meta: Any) -> Response:
    """Build a successful response wrapping data and meta."""
    return Response(status=status, data={"data": data, "meta": meta}, is_error=False)


def errorf(status: int, msg: str, *args: Any) -> Response:
    """Build an error response; msg uses str.format placeholders when args are given."""
    text = msg.format(*args) if args else msg
    return Response(
        status=status,
        data={"error_msg": text, "is_error": True, "status_code": status},
        is_error=True,
    )


def middleware_error(status: int, msg: str, *args: Any) -> Response:
    """Build the error response a request filter sends before any handler runs."""
    return errorf(status, msg, *args)