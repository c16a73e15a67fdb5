"""Configured GraphQL endpoints and the file that feeds them."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from .config import CONFIG_POLL_INTERVAL
from .models import EndpointRecord
from .storage import load_endpoints, save_endpoints

logger = logging.getLogger(__name__)

EndpointsListener = Callable[[tuple[EndpointRecord, ...]], None]


class EndpointRegistry:
    """Ordered endpoint records, swapped wholesale on reload.

    Readers call :meth:`list` without locking. A reader racing a reload sees
    either the old or the new tuple, never a mix.
    """

    def __init__(self, endpoints: Iterable[EndpointRecord] = ()) -> None:
        self._endpoints: tuple[EndpointRecord, ...] = tuple(endpoints)
        self._listeners: list[EndpointsListener] = []

    def list(self) -> tuple[EndpointRecord, ...]:
        return self._endpoints

    def find(self, url: str) -> EndpointRecord | None:
        for record in self._endpoints:
            if record.url == url:
                return record
        return None

    def reload(self, endpoints: Iterable[EndpointRecord]) -> None:
        self._endpoints = tuple(endpoints)
        logger.debug("Endpoints reloaded: %s", [record.url for record in self._endpoints])
        for listener in list(self._listeners):
            try:
                listener(self._endpoints)
            except Exception:
                logger.exception("Endpoint listener %r failed", listener)

    def subscribe(self, listener: EndpointsListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: EndpointsListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass


class EndpointConfigProvider:
    """Loads ``graphql.config.json`` into a registry and keeps it current."""

    def __init__(self, registry: EndpointRegistry, path: Path, extra: Iterable[EndpointRecord] = ()) -> None:
        self.registry = registry
        self.path = path
        self.extra = tuple(extra)
        self._mtime: float | None = None

    def load(self) -> bool:
        """Reload the registry from disk; False keeps the previous list."""
        try:
            endpoints = load_endpoints(self.path)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load endpoints from %s: %s", self.path, exc)
            return False
        self._mtime = self._current_mtime()
        self.registry.reload([*self.extra, *endpoints])
        return True

    def save(self, endpoints: Iterable[EndpointRecord]) -> None:
        save_endpoints(self.path, endpoints)
        self.load()

    async def watch(self, interval: float = CONFIG_POLL_INTERVAL) -> None:
        """Poll the file and reload whenever its modification time changes."""
        while True:
            await asyncio.sleep(interval)
            if self._current_mtime() != self._mtime:
                logger.info("Endpoint configuration changed: %s", self.path)
                if not self.load():
                    self._mtime = self._current_mtime()

    def _current_mtime(self) -> float | None:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None
