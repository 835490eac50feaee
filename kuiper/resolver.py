"""kuiper resolver - load a request file, inherit headers, interpolate.

Headers are inherited from per-directory header files between the root and
the request file. Each directory contributes one scope layer; layers are
folded outermost first so the directory closest to the file wins, and the
file's own headers win over all of them.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from kuiper.core import HEADERS_FILE
from kuiper.errors import FilesystemError, MalformedDefinition, RequestNotFound
from kuiper.interpolate import interpolate_definition
from kuiper.models import Headers, RequestDefinition, ResolvedRequest

logger = structlog.get_logger(__name__)


def _read_json(path: Path) -> Any:
    """Read JSON from path. FileNotFoundError is left to the caller."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise
    except OSError as e:
        raise FilesystemError(path, e) from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedDefinition(path, str(e)) from e


def _check_headers(path: Path, data: Any) -> Headers:
    if not isinstance(data, dict):
        raise MalformedDefinition(path, "headers must be an object")
    for name, value in data.items():
        if value is not None and not isinstance(value, str):
            raise MalformedDefinition(path, f"header '{name}' must be a string or null")
    return dict(data)


def load_definition(path: str | Path) -> RequestDefinition:
    """Parse a request file into a RequestDefinition.

    Unknown top-level keys are ignored.
    """
    path = Path(path)
    try:
        data = _read_json(path)
    except FileNotFoundError:
        raise RequestNotFound(path) from None

    if not isinstance(data, dict):
        raise MalformedDefinition(path, "request must be an object")
    for key in ("uri", "method"):
        if not isinstance(data.get(key), str):
            raise MalformedDefinition(path, f"'{key}' must be a string")

    params = data.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict) or not all(isinstance(v, str) for v in params.values()):
        raise MalformedDefinition(path, "params must be an object of strings")

    headers = data.get("headers")
    if headers is None:
        headers = {}

    definition = RequestDefinition(
        name=str(path),
        uri=data["uri"],
        method=data["method"],
        headers=_check_headers(path, headers),
        params=dict(params),
        body=data.get("body"),
    )
    logger.debug("parsed request", path=str(path))
    return definition


def load_header_file(path: str | Path) -> Headers:
    """Parse one per-directory header file. A missing file yields {}."""
    path = Path(path)
    try:
        data = _read_json(path)
    except FileNotFoundError:
        return {}
    logger.debug("parsed headers", path=str(path))
    return _check_headers(path, data)


def scope_directories(path: str | Path, root: str | Path | None = None) -> list[Path]:
    """Directories contributing headers to path, outermost first.

    Runs from root (inclusive) down to the file's parent (inclusive). Without
    a root, or for a file outside it, every ancestor except the filesystem
    anchor is used.
    """
    parent = Path(path).parent
    ancestors = [parent, *parent.parents]
    if root is not None:
        root = Path(root)
        if root == parent or root in parent.parents:
            return list(reversed(ancestors[: ancestors.index(root) + 1]))
    return [d for d in reversed(ancestors) if d != Path(d.anchor)]


def collect_scope_layers(
    path: str | Path,
    root: str | Path | None = None,
    headers_file: str = HEADERS_FILE,
) -> list[Headers]:
    """One header mapping per scope directory, outermost first."""
    return [load_header_file(d / headers_file) for d in scope_directories(path, root)]


def merge_layers(layers: list[Headers]) -> Headers:
    """Fold scope layers left to right; later layers overwrite earlier ones."""
    merged: Headers = {}
    for layer in layers:
        merged.update(layer)
    return merged


def apply_inherited(headers: Headers, inherited: Headers) -> Headers:
    """Add inherited headers the request does not declare itself."""
    result = dict(headers)
    for name, value in inherited.items():
        result.setdefault(name, value)
    return result


def resolve(
    path: str | Path,
    root: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    interpolate_params: bool = True,
    headers_file: str = HEADERS_FILE,
) -> ResolvedRequest:
    """Resolve the request file at path into a ResolvedRequest.

    A relative path is taken from root. env is the read-only lookup for
    {{env:...}} placeholders and defaults to os.environ.
    """
    path = Path(path)
    if not path.is_absolute() and root is not None:
        path = Path(root) / path
    path = path.resolve()
    if root is not None:
        root = Path(root).resolve()

    definition = load_definition(path)
    inherited = merge_layers(collect_scope_layers(path, root, headers_file))
    definition.headers = apply_inherited(definition.headers, inherited)

    definition = interpolate_definition(definition, env, interpolate_params)
    logger.debug("resolved request", path=str(path), method=definition.method)
    return ResolvedRequest.from_definition(definition)
