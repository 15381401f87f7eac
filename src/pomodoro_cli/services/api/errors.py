"""Errors raised by the API endpoint wrappers."""

from __future__ import annotations

from typing import Any

import httpx


class APIError(Exception):
    """A request the server answered with ``success: false`` or an error status.

    Attributes:
        errors: Validation messages from the server, possibly empty
        status_code: HTTP status, None when the body alone signalled failure
    """

    def __init__(
        self,
        message: str,
        *,
        errors: list[str] | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.errors = errors or []
        self.status_code = status_code


class ReauthRequiredError(APIError):
    """The server flagged ``reauth: true``; the user must sign in again."""


def api_error_from_payload(data: Any, status_code: int | None = None) -> APIError:
    """Build the matching error from a failure body such as ``{"success": false, ...}``."""
    if not isinstance(data, dict):
        data = {}

    raw_errors = data.get("errors")
    if isinstance(raw_errors, list):
        errors = [str(e) for e in raw_errors]
    elif data.get("error"):
        errors = [str(data["error"])]
    else:
        errors = []

    message = "; ".join(errors) or (
        f"Server returned status {status_code}" if status_code else "Request failed"
    )

    if data.get("reauth") or status_code == 401:
        return ReauthRequiredError(message, errors=errors, status_code=status_code)
    return APIError(message, errors=errors, status_code=status_code)


def api_error_from_response(response: httpx.Response) -> APIError:
    """Build the matching error from a non-success HTTP response."""
    try:
        data = response.json()
    except ValueError:
        data = {}
    return api_error_from_payload(data, response.status_code)
