"""
webcore — Problem Envelopes
============================

What:  The structured error body sent with every 4xx/5xx response, and one
       constructor per error category.
How:   ``Problem`` is a frozen pydantic model. ``error`` and ``specifics``
       are dropped from the JSON when empty, and specifics keys are emitted
       in sorted order so bodies are byte-stable.

Response shape:
    {
        "type": "https://problems.example.com/http/not-found",
        "title": "Not Found",
        "detail": "The User '1234' was not found.",
        "error": "<raw exception text, debugging only>",
        "specifics": {"subject": "1234", "subjectType": "User"}
    }
"""

from typing import Any, Dict, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from webcore.config import Settings
from webcore.utils import byte_size_to_friendly_string


class Problem(BaseModel):
    """A problem-details document. Immutable once constructed."""

    type: str = Field(description="{prefix}/{category} link identifying the error class")
    title: str = Field(description="Fixed human-readable title for the category")
    detail: str = Field(description="Message specific to this occurrence")
    error: Optional[str] = Field(default=None, description="Raw diagnostic text (debug only)")
    specifics: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler) -> Dict[str, Any]:
        data = handler(self)
        if not data.get("error"):
            data.pop("error", None)
        if data.get("specifics"):
            data["specifics"] = dict(sorted(data["specifics"].items()))
        else:
            data.pop("specifics", None)
        return data


def _type(config: Settings, category: str) -> str:
    return f"{config.problem_type_prefix}/{category}"


def _debug_text(config: Settings, err: Optional[BaseException]) -> Optional[str]:
    if config.debugging_enabled and err is not None:
        return str(err)
    return None


def unsupported_media_type(
    config: Settings, provided_content_type: str, allowed_content_types: Sequence[str]
) -> Problem:
    """415: the request's Content-Type is not in the endpoint's allowed list."""
    return Problem(
        type=_type(config, "http/unsupported-media-type"),
        title="Unsupported Media Type",
        detail=f"The Content-Type '{provided_content_type}' is not supported by this endpoint.",
        specifics={
            "providedContentType": provided_content_type,
            "allowedContentTypes": list(allowed_content_types),
        },
    )


def request_entity_too_large(config: Settings, content_length: int, maximum: int) -> Problem:
    """413: declared Content-Length exceeds the endpoint maximum."""
    return Problem(
        type=_type(config, "http/request-entity-too-large"),
        title="Request Entity Too Large",
        detail=(
            f"The provided request entity of length {byte_size_to_friendly_string(content_length)} "
            f"({content_length} bytes) exceeds the maximum of {byte_size_to_friendly_string(maximum)} "
            f"({maximum} bytes) on this endpoint."
        ),
        specifics={
            "contentLength": content_length,
            "maximumContentLength": maximum,
        },
    )


def length_required(config: Settings) -> Problem:
    """411: no positive Content-Length was declared."""
    return Problem(
        type=_type(config, "http/length-required"),
        title="Length Required",
        detail="This endpoint requires that the Content-Length header be set to a positive, non-zero value.",
    )


def method_not_allowed(config: Settings, method: str, allowed_methods: Sequence[str]) -> Problem:
    """405: the request method is not served on this path."""
    return Problem(
        type=_type(config, "http/method-not-allowed"),
        title="Method Not Allowed",
        detail=f"This endpoint does not allow use of the '{method}' method.",
        specifics={
            "methodUsed": method,
            "allowedMethods": list(allowed_methods),
        },
    )


def deserialization(config: Settings, err: Optional[BaseException] = None) -> Problem:
    """400: the body could not be decoded into the request model."""
    return Problem(
        type=_type(config, "json/deserialization"),
        title="Deserialization Error",
        detail="The provided request body could not be meaningfully deserialized.  It appears to be invalid.",
        error=_debug_text(config, err),
    )


def unprocessable_entity(config: Settings, field: str, message: str) -> Problem:
    """422: the body decoded, but purify() rejected one of its fields."""
    return Problem(
        type=_type(config, "http/unprocessable-entity"),
        title="Unprocessable Entity",
        detail="The provided request body was understood but contained some invalid values.",
        specifics={
            "field": field,
            "error": message,
        },
    )


def not_found(config: Settings, subject_type: str, subject: str) -> Problem:
    """404: the named subject does not exist."""
    return Problem(
        type=_type(config, "http/not-found"),
        title="Not Found",
        detail=f"The {subject_type} '{subject}' was not found.",
        specifics={
            "subjectType": subject_type,
            "subject": subject,
        },
    )


def internal_server_error(config: Settings, err: Optional[BaseException] = None) -> Problem:
    """500: anything the server could not recover from."""
    return Problem(
        type=_type(config, "http/internal-server-error"),
        title="Internal Server Error",
        detail="An internal server error prevented the request from completing.",
        error=_debug_text(config, err),
    )


def serialization_failure_body(config: Settings, err: Optional[BaseException] = None) -> bytes:
    """
    Raw JSON for a 500 caused by a response model that would not serialize.

    Built from plain strings only, so producing it cannot fail in turn.
    """
    problem = Problem(
        type=_type(config, "http/internal-server-error"),
        title="Internal Server Error",
        detail="Serialization of the response model failed.",
        error=_debug_text(config, err),
    )
    return problem.model_dump_json().encode("utf-8")
