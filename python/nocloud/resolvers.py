from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .errors import ControlPlaneError

T = TypeVar("T", bound=BaseModel)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return "API Error"


def resolve_json_response(response: httpx.Response, model: type[T] | None = None) -> T | Any:
    """Unwrap a NoCloud API response.

    Returns the parsed JSON body, validated into model when given, or None for
    an empty body.

    Raises:
        ControlPlaneError: If the response status is not 2xx. The error carries the
            response status and the server's message when the body provides one.
            Also raised, with the 2xx status, when a successful response body is not
            JSON or does not match model.
    """
    if not response.is_success:
        raise ControlPlaneError.from_status(response.status_code, _error_message(response))

    if not response.content:
        return None

    try:
        data = response.json()
    except ValueError as exc:
        raise ControlPlaneError.from_status(response.status_code, "Malformed JSON response") from exc

    if model is None:
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ControlPlaneError.from_status(
            response.status_code,
            f"Unexpected response shape for {model.__name__}: {exc.error_count()} validation error(s)",
        ) from exc
