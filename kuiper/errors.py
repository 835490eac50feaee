"""kuiper errors - everything resolution can fail with."""

from __future__ import annotations

from pathlib import Path


class KuiperError(Exception):
    """Base class for all resolution failures."""


class RequestNotFound(KuiperError):
    """No request file at the given path, or a search matched nothing."""

    def __init__(self, name: str | Path):
        self.name = str(name)
        super().__init__(f"request not found: '{self.name}'")


class AmbiguousRequest(KuiperError):
    """A search matched more than one request file."""

    def __init__(self, term: str, candidates: list[Path]):
        self.term = term
        self.candidates = sorted(candidates)
        super().__init__(
            f"'{term}' matches {len(self.candidates)} requests",
        )


class MalformedDefinition(KuiperError):
    """A request or header file could not be parsed."""

    def __init__(self, path: str | Path, detail: str):
        self.path = Path(path)
        self.detail = detail
        super().__init__(f"malformed file '{self.path}': {detail}")


class FilesystemError(KuiperError):
    """I/O failure other than a missing file."""

    def __init__(self, path: str | Path, cause: OSError):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"I/O error at '{self.path}': {cause}")


class InterpolationError(KuiperError):
    """A placeholder could not be resolved."""


class MissingEnvVar(InterpolationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"missing env var: '{name}'")


class InvalidFormat(InterpolationError):
    def __init__(self, text: str):
        self.text = text
        super().__init__(f"invalid interpolation format in '{text}'")


class InvalidExpr(InterpolationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"invalid expr: '{name}'")


class InvalidInterpolatedBody(KuiperError):
    """The body stopped being valid JSON after interpolation."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"body is not valid JSON after interpolation: {detail}")
