"""kuiper locator - find request files by path or by search term."""

from __future__ import annotations

from collections import deque
from pathlib import Path

import structlog

from kuiper.core import REQUEST_EXTENSION
from kuiper.errors import AmbiguousRequest, FilesystemError, RequestNotFound

logger = structlog.get_logger(__name__)


def locate_exact(path: str | Path, base_dir: str | Path | None = None) -> Path:
    """Canonicalize path to an existing request file.

    Relative paths are taken from base_dir (CWD if not given).
    Raises RequestNotFound if nothing is there, so the caller can search.
    """
    p = Path(path)
    if not p.is_absolute():
        p = Path(base_dir or Path.cwd()) / p
    try:
        p = p.resolve(strict=True)
    except FileNotFoundError:
        raise RequestNotFound(path) from None
    except OSError as e:
        raise FilesystemError(p, e) from e
    if not p.is_file():
        raise RequestNotFound(path)
    logger.debug("found request by path", path=str(p))
    return p


def search(
    root: str | Path,
    term: str,
    extension: str = REQUEST_EXTENSION,
) -> list[Path]:
    """Breadth-first search under root for request files containing term.

    term is a plain case-sensitive substring of the full path. Sibling
    order follows the filesystem and must not be relied upon.
    """
    suffix = f".{extension}"
    matches: list[Path] = []
    dirs: deque[Path] = deque([Path(root)])
    while dirs:
        current = dirs.popleft()
        try:
            entries = list(current.iterdir())
        except OSError as e:
            raise FilesystemError(current, e) from e
        for entry in entries:
            if entry.is_dir():
                dirs.append(entry)
            elif entry.is_file() and entry.suffix == suffix and term in str(entry):
                matches.append(entry)
    logger.debug("searched requests", root=str(root), term=term, matches=len(matches))
    return matches


def find_request(
    name: str,
    root: str | Path,
    extension: str = REQUEST_EXTENSION,
) -> Path:
    """Exact lookup under root, falling back to search.

    Zero search matches raise RequestNotFound; several raise
    AmbiguousRequest with every candidate.
    """
    try:
        return locate_exact(name, root)
    except RequestNotFound:
        logger.debug("no request at path, searching", name=name, root=str(root))

    matches = search(root, name, extension)
    if not matches:
        raise RequestNotFound(name)
    if len(matches) > 1:
        raise AmbiguousRequest(name, matches)
    return matches[0].resolve()


def list_requests(root: str | Path, extension: str = REQUEST_EXTENSION) -> list[Path]:
    """Every request file under root, sorted."""
    return sorted(search(root, "", extension))
