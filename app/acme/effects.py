"""
Post-write effects a mutation asks its host for.

Actions only ever call `revalidate_path()` and `redirect()`; what those mean is up to the
host. The Flask host records stale paths for the response and answers with a 303.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

from flask import g, redirect as flask_redirect

logger = logging.getLogger(__name__)


class PostWriteEffects(Protocol):
    def revalidate_path(self, path: str) -> None: ...

    def redirect(self, path: str) -> Any: ...


class FlaskEffects:
    def revalidate_path(self, path: str) -> None:
        paths: list[str] = getattr(g, "revalidated_paths", None) or []
        if path not in paths:
            paths.append(path)
        g.revalidated_paths = paths
        logger.debug("revalidate path=%s request_id=%s", path, getattr(g, "request_id", None))

    def redirect(self, path: str):
        return flask_redirect(path, code=303)


class RecordingEffects:
    """Host for scripts and tests: remembers what was asked, returns the target path."""

    def __init__(self) -> None:
        self.revalidated: list[str] = []
        self.redirected_to: str | None = None

    def revalidate_path(self, path: str) -> None:
        self.revalidated.append(path)

    def redirect(self, path: str) -> str:
        self.redirected_to = path
        return path
