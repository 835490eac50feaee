"""kuiper interpolation - {{env:VAR}} and {{expr:NAME}} placeholders.

Scanning is deliberately simple: every "{{" is paired with the nearest
following "}}", with no nesting and no balancing. A literal "}}" inside a
value therefore ends the placeholder early. That is observable behavior,
so it is kept as is.
"""

from __future__ import annotations

import datetime
import json
import os
import uuid
from collections.abc import Callable, Iterator, Mapping
from dataclasses import replace

import structlog

from kuiper.errors import (
    InvalidExpr,
    InvalidFormat,
    InvalidInterpolatedBody,
    MissingEnvVar,
)
from kuiper.models import RequestDefinition

logger = structlog.get_logger(__name__)

OPEN = "{{"
CLOSE = "}}"


def _now() -> str:
    """Current UTC time as RFC 3339, e.g. 2024-05-01T12:00:00.123456Z."""
    return datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z")


EXPRESSIONS: dict[str, Callable[[], str]] = {
    "uuid": lambda: str(uuid.uuid4()),
    "now": _now,
}


def iter_placeholders(text: str) -> Iterator[tuple[int, int]]:
    """Yield (start, end) spans of placeholders in text, left to right.

    end is exclusive and includes the close marker. Spans are computed on
    the original text and may overlap when a placeholder contains "{{".
    An unclosed "{{" raises InvalidFormat only once the scan reaches it.
    """
    start = text.find(OPEN)
    while start != -1:
        close = text.find(CLOSE, start)
        if close == -1:
            raise InvalidFormat(text)
        yield start, close + len(CLOSE)
        start = text.find(OPEN, start + len(OPEN))


def find_placeholders(text: str) -> list[tuple[int, int]]:
    """Every placeholder span in text."""
    return list(iter_placeholders(text))


def evaluate(placeholder: str, env: Mapping[str, str]) -> str:
    """Evaluate the inside of one placeholder, e.g. "env:HOME"."""
    kind, sep, name = placeholder.partition(":")
    if not sep:
        raise InvalidFormat(placeholder)

    if kind == "env":
        try:
            return env[name]
        except KeyError:
            raise MissingEnvVar(name) from None

    if kind == "expr":
        fn = EXPRESSIONS.get(name)
        if fn is None:
            raise InvalidExpr(name)
        return fn()

    logger.error("unknown placeholder kind", kind=kind, placeholder=placeholder)
    raise InvalidFormat(placeholder)


def interpolate_str(text: str, env: Mapping[str, str] | None = None) -> str:
    """Replace every placeholder in text.

    Each span is evaluated left to right against the original offsets.
    A span starting inside one already replaced is still evaluated, so its
    errors surface, but its text is gone and nothing more is emitted.
    """
    if env is None:
        env = os.environ

    out: list[str] = []
    pos = 0
    for start, end in iter_placeholders(text):
        value = evaluate(text[start + len(OPEN) : end - len(CLOSE)], env)
        if start < pos:
            continue
        out.append(text[pos:start])
        out.append(value)
        pos = end
    out.append(text[pos:])
    return "".join(out)


def interpolate_body(body, env: Mapping[str, str]):
    """Interpolate a JSON-like body through its JSON text form."""
    if body is None:
        return None
    text = json.dumps(body, ensure_ascii=False)
    interpolated = interpolate_str(text, env)
    try:
        return json.loads(interpolated)
    except json.JSONDecodeError as e:
        raise InvalidInterpolatedBody(str(e)) from e


def interpolate_definition(
    definition: RequestDefinition,
    env: Mapping[str, str] | None = None,
    interpolate_params: bool = True,
) -> RequestDefinition:
    """Return a copy of definition with every placeholder resolved.

    Order: uri, headers, params, body. The first failure propagates and
    nothing partial is returned.
    """
    if env is None:
        env = os.environ

    uri = interpolate_str(definition.uri, env)
    headers = {
        name: interpolate_str(value, env) if value is not None else None
        for name, value in definition.headers.items()
    }
    if interpolate_params:
        params = {name: interpolate_str(value, env) for name, value in definition.params.items()}
    else:
        params = dict(definition.params)
    body = interpolate_body(definition.body, env)

    logger.debug("interpolated request", request=definition.name)
    return replace(definition, uri=uri, headers=headers, params=params, body=body)
