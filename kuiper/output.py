"""kuiper output - render responses and resolved requests for the terminal."""

from __future__ import annotations

import json

from kuiper.models import ResolvedRequest


def format_output(
    result,  # RequestResult from executor.py
    verbose: bool = False,
    raw: bool = False,
) -> str:
    """Format the request result for CLI output.

    Default is STATUS, TIME and BODY; verbose adds response headers,
    raw prints the body alone.
    """
    if result.error:
        return f"ERROR: {result.error}"

    if raw:
        body = result.body
        if isinstance(body, dict | list):
            return json.dumps(body, indent=2)
        return str(body) if body is not None else ""

    lines: list[str] = [
        f"STATUS: {result.status_code}",
        f"TIME: {int(result.elapsed_ms)}ms",
    ]

    if verbose and result.headers:
        lines.append("HEADERS:")
        for key, value in result.headers.items():
            lines.append(f"  {key}: {value}")

    body = result.body
    if body is not None:
        lines.append("BODY:")
        if isinstance(body, dict | list):
            lines.append(json.dumps(body, indent=2))
        else:
            lines.append(str(body))

    return "\n".join(lines)


def format_request(request: ResolvedRequest) -> str:
    """Render a resolved request without sending it (--dry-run)."""
    data = {
        "method": request.method,
        "uri": request.uri,
        "headers": dict(request.headers),
        "params": dict(request.params),
        "body": request.body,
    }
    return json.dumps(data, indent=2)
