"""
Error types and helpers shared by the API client and the dispatchers.

Dispatchers turn every failure into a single user-facing message, so the
helpers here never raise themselves.
"""
from typing import Any

import httpx
from pydantic import ValidationError

GENERIC_ERROR_MESSAGE = "Something went wrong, please try again."


class AuthHeaderError(ValueError):
    """The backend answered an auth call without usable user/token headers."""


# Everything a dispatcher treats as a failed operation rather than a bug.
REQUEST_ERRORS = (httpx.HTTPError, AuthHeaderError, ValidationError)


def is_unauthorized(exc: BaseException) -> bool:
    """True when the failure is a 401, which forced logout already handled."""
    return (
        isinstance(exc, httpx.HTTPStatusError)
        and exc.response.status_code == httpx.codes.UNAUTHORIZED
    )


def _message_from_body(response: httpx.Response) -> str:
    try:
        body: Any = response.json()
    except (ValueError, httpx.ResponseNotRead):
        body = None

    if isinstance(body, dict):
        for key in ("message", "msg", "error"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

    try:
        text = response.text.strip()
    except httpx.ResponseNotRead:
        text = ""
    # express-rate-limit replies with a plain-text message
    if text and body is None and not text.startswith("<"):
        return text
    return ""


def extract_error_message(exc: BaseException) -> str:
    """Best-effort, user-facing message for a failed request."""
    if isinstance(exc, httpx.HTTPStatusError):
        message = _message_from_body(exc.response)
        return message or f"Request failed with status {exc.response.status_code}"
    if isinstance(exc, httpx.TimeoutException):
        return "The server took too long to respond, please try again."
    if isinstance(exc, httpx.RequestError):
        return "Could not reach the server, please check your connection."
    if isinstance(exc, ValidationError):
        return "Unexpected response from the server."
    return str(exc) or GENERIC_ERROR_MESSAGE
