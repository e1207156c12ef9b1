"""Response helpers -- body extraction and CLI rendering of game server responses.

:func:`extract_response_data` is the default hand-off to field extraction:
JSON bodies (the ``fetchResources``/``fetchTechs`` endpoints) are decoded,
HTML pages are returned as text. :func:`format_api_response` routes a
response through the output system for ``ogrelay fetch``.
"""

from __future__ import annotations

from typing import Any

import httpx

from ogrelay.output import get_output


def format_api_response(response: httpx.Response) -> None:
    """Print the status line to stderr and the rendered body to stdout."""
    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())

    content_type = response.headers.get("content-type", "text/html")
    data = extract_response_data(response)
    if data is not None:
        output.format_response(data, content_type)


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from a response.

    Returns:
        A JSON-decoded object when the body parses as JSON, the raw text
        otherwise, or ``None`` for an empty body.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        pass

    return response.text
