"""Restarts the language service and re-checks the active document."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from pathlib import PurePath
from typing import Protocol

from .config import GRAPHQL_EXTENSIONS, GRAPHQL_LANGUAGE
from .exceptions import RestartError
from .language_service import STDERR, OutputConsumer
from .session import Document

logger = logging.getLogger(__name__)


class LanguageService(Protocol):
    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def restart(self) -> None: ...

    def attach(self, consumer: OutputConsumer) -> None: ...

    def detach(self) -> None: ...


class Workspace(Protocol):
    def active_document(self) -> Document | None: ...


class Analyzer(Protocol):
    def revalidate(self, document: Document) -> None: ...


def is_graphql_document(document: Document) -> bool:
    language = getattr(document, "language", None)
    if language:
        return language == GRAPHQL_LANGUAGE
    return PurePath(document.name).suffix.lower() in GRAPHQL_EXTENSIONS


class ServiceConsole:
    """Output consumer that keeps recent lines and surfaces stderr."""

    def __init__(
        self,
        write: Callable[[str], None] | None = None,
        reveal: Callable[[], None] | None = None,
        max_lines: int = 1000,
    ) -> None:
        self.write = write
        self.reveal = reveal
        self.lines: deque[str] = deque(maxlen=max_lines)

    def on_text(self, text: str, stream: str) -> None:
        self.lines.append(text)
        if self.write is not None:
            self.write(text)
        if stream == STDERR and text.strip() and self.reveal is not None:
            self.reveal()


class ProcessSupervisor:
    """Serializes restarts of one language service.

    A restart requested while another is in flight is rejected rather than
    queued: the running restart already brings a fresh process up.
    """

    def __init__(
        self,
        service: LanguageService,
        console: OutputConsumer,
        workspace: Workspace | None = None,
        analyzer: Analyzer | None = None,
    ) -> None:
        self.service = service
        self.console = console
        self.workspace = workspace
        self.analyzer = analyzer
        self._lock = asyncio.Lock()

    @property
    def restarting(self) -> bool:
        return self._lock.locked()

    def connect(self) -> None:
        self.service.attach(self.console)

    def disconnect(self) -> None:
        self.service.detach()

    async def start(self) -> None:
        async with self._lock:
            try:
                await self.service.start()
            except Exception as exc:
                raise RestartError(f"Could not start language service: {exc}") from exc
            self.connect()

    async def shutdown(self) -> None:
        async with self._lock:
            self.disconnect()
            await self.service.stop()

    async def restart(self, on_complete: Callable[[], None] | None = None) -> bool:
        if self._lock.locked():
            logger.info("Language service restart already in progress; request ignored")
            return False
        async with self._lock:
            self.disconnect()
            try:
                await self.service.restart()
            except Exception as exc:
                logger.error("Language service restart failed: %s", exc)
                raise RestartError(f"Could not restart language service: {exc}") from exc
            self.connect()
        logger.info("Language service restarted")
        (on_complete or self.revalidate_active_document)()
        return True

    def revalidate_active_document(self) -> None:
        if self.workspace is None or self.analyzer is None:
            return
        document = self.workspace.active_document()
        if document is None or not is_graphql_document(document):
            return
        logger.debug("Re-validating %s", document.name)
        self.analyzer.revalidate(document)
