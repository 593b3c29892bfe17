"""
Request validation for the generation endpoints.

Turns a raw JSON body (POST) or query string (GET) into a fully populated
GenerationRequest. All defaulting happens here, once.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional

import pydantic

from .errors import InvalidField, MissingRequiredField
from .models import (
    DEFAULT_TIMEOUT_MS,
    DEFAULT_VIEWPORT_HEIGHT,
    GET_VIEWPORT_WIDTH,
    GenerationRequest,
)

logger = logging.getLogger(__name__)

# Query parameters consumed elsewhere and never treated as request fields
RESERVED_QUERY_PARAMS = {"api_key"}

TRUTHY = {"true", "1", "yes"}


def _require_url(value: Any) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingRequiredField("url")


def _build(data: Dict[str, Any]) -> GenerationRequest:
    """Validate into a GenerationRequest, mapping pydantic errors to InvalidField."""
    try:
        return GenerationRequest.model_validate(data)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "body"
        if first["type"] == "extra_forbidden":
            raise InvalidField(field, "unsupported field") from e
        raise InvalidField(field, first["msg"]) from e


def parse_body(payload: Any) -> GenerationRequest:
    """
    Validate a POST body.

    Args:
        payload: Decoded JSON body (None when the body was empty)

    Returns:
        GenerationRequest with defaults applied

    Raises:
        MissingRequiredField: url absent or blank
        InvalidField: any field is invalid or unknown
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        # A list or scalar body has no url field
        raise MissingRequiredField("url")

    _require_url(payload.get("url"))
    return _build(payload)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in TRUTHY


def _parse_int(name: str, value: str, default: int) -> int:
    """
    Parse a numeric query value, falling back to the default if unparseable.

    Range checks are left to the model so GET and POST reject the same values.
    """
    try:
        return int(value.strip())
    except ValueError:
        logger.warning(f"Unparseable {name}={value!r}, using default {default}")
        return default


def _single_value(params: Mapping[str, str], key: str) -> Optional[str]:
    """Return the one value given for key, rejecting repeated parameters."""
    getlist = getattr(params, "getlist", None)
    values = getlist(key) if getlist is not None else (
        [params[key]] if key in params else []
    )
    if len(values) > 1:
        raise InvalidField(key, "repeated query parameter")
    return values[0] if values else None


def _passthrough(value: str) -> str:
    return value


# query param -> converter; names match GenerationRequest fields or aliases
_QUERY_FIELDS: Dict[str, Callable[[str], Any]] = {
    "url": _passthrough,
    "format": _passthrough,
    "landscape": _parse_bool,
    "print_background": _parse_bool,
    "wait_until": _passthrough,
    "layout": _passthrough,
    "filename": _passthrough,
}

_QUERY_NUMERIC_DEFAULTS = {
    "viewport_width": GET_VIEWPORT_WIDTH,
    "viewport_height": DEFAULT_VIEWPORT_HEIGHT,
    "timeout": DEFAULT_TIMEOUT_MS,
}


def parse_query(params: Mapping[str, str]) -> GenerationRequest:
    """
    Validate GET query parameters.

    Supports a subset of the body fields. Unknown parameters are rejected
    rather than dropped, as are repeated parameters. Unparseable numbers
    fall back to their defaults; parseable ones are range-checked like POST.

    Raises:
        MissingRequiredField: url absent or blank
        InvalidField: unknown or repeated parameter, or a field the model rejects
    """
    _require_url(_single_value(params, "url"))

    unknown = sorted(
        key for key in params
        if key not in _QUERY_FIELDS
        and key not in _QUERY_NUMERIC_DEFAULTS
        and key not in RESERVED_QUERY_PARAMS
    )
    if unknown:
        raise InvalidField(unknown[0], "unsupported query parameter")

    data: Dict[str, Any] = {
        "viewport_width": GET_VIEWPORT_WIDTH,
        "viewport_height": DEFAULT_VIEWPORT_HEIGHT,
    }
    for key, convert in _QUERY_FIELDS.items():
        value: Optional[str] = _single_value(params, key)
        if value is not None:
            data[key] = convert(value)
    for key, default in _QUERY_NUMERIC_DEFAULTS.items():
        value = _single_value(params, key)
        if value is not None:
            data[key] = _parse_int(key, value, default)

    return _build(data)
