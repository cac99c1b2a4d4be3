"""Request helpers shared by every WaifuVault operation.

Everything here is a pure function of its arguments so the client
can be tested with any substitute transport.
"""

import json
import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

import httpx

from .exceptions import VaultAPIError
from .models import ErrorResponse

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Public WaifuVault host
VAULT_URL: str = "https://waifuvault.moe"

# Root of the REST resources below the host
REST_ROOT: str = "rest"


# =============================================================================
# URL building
# =============================================================================


def stringify_param(value: Any) -> str:
    """Convert a query parameter value to its wire form.

    Booleans are written as ``true``/``false``; everything else goes
    through ``str()``.

    Args:
        value: Parameter value (never None)

    Returns:
        String form of the value
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def get_url(
    query_params: Optional[Mapping[str, Any]] = None,
    path: Optional[str] = None,
    base_url: str = VAULT_URL,
) -> str:
    """Build a REST resource URL.

    Args:
        query_params: Query parameters; keys whose value is None are dropped.
            An empty mapping still produces a trailing ``?``, no mapping at
            all produces none.
        path: Optional path below the REST root (e.g. a file token or
            ``album/<token>``)
        base_url: Vault host

    Returns:
        Fully qualified URL

    Example:
        >>> get_url({"expires": "1d", "hide_filename": None})
        'https://waifuvault.moe/rest?expires=1d'
        >>> get_url({}, "abc")
        'https://waifuvault.moe/rest/abc?'
    """
    url = f"{base_url.rstrip('/')}/{REST_ROOT}"
    if path:
        url += f"/{path}"
    if query_params is None:
        return url

    params = [
        (key, stringify_param(value))
        for key, value in query_params.items()
        if value is not None
    ]
    return f"{url}?{urlencode(params)}"


# =============================================================================
# Response checking
# =============================================================================


def parse_error_body(body: str) -> Optional[ErrorResponse]:
    """Decode an error body into an ErrorResponse.

    Args:
        body: Raw response text

    Returns:
        The decoded record, or None if the body is not a JSON object with
        ``status``, ``name`` and ``message``
    """
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    if not all(key in data for key in ("status", "name", "message")):
        return None
    return ErrorResponse.from_dict(data)


def check_error(response: httpx.Response) -> None:
    """Raise VaultAPIError if the response is not a 2xx.

    The body must already have been read.

    Args:
        response: Response to inspect

    Raises:
        VaultAPIError: On any status outside 200-299. The message is
            ``Error <status> (<name>): <message>`` when the body is a vault
            error record, otherwise the raw body text.
    """
    if 200 <= response.status_code <= 299:
        return

    body = response.text
    error = parse_error_body(body)
    if error is not None:
        message = f"Error {error.status} ({error.name}): {error.message}"
    else:
        message = body

    logger.debug("Request failed with status %d: %s", response.status_code, message)
    raise VaultAPIError(
        message, status_code=response.status_code, body=body, error=error
    )


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format a byte count in human-readable form.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB")
    """
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"
