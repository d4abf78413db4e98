"""Cooperative cancellation and best-effort progress reporting.

Every stage entry point takes an optional :class:`CancellationToken` and an
optional progress callable.  Stages poll the token at natural boundaries
(raster row, contour, path) and return whatever they have computed so far.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class CancellationToken:
    """Thread-safe flag an external caller sets to stop the pipeline."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def is_cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.cancelled


def report(progress: Optional[ProgressCallback], fraction: float) -> None:
    """Forward *fraction* (clamped to [0, 1]) to *progress*.

    A failing callback is logged and otherwise ignored; progress never
    changes the pipeline result.
    """
    if progress is None:
        return
    try:
        progress(min(1.0, max(0.0, fraction)))
    except Exception:
        logger.exception("Progress callback failed")
