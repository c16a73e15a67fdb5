"""The backing GraphQL language service, run as a child process."""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Mapping, Sequence
from typing import Protocol

from .config import LANGUAGE_SERVICE_STOP_TIMEOUT
from .models import ServiceConfiguration

logger = logging.getLogger(__name__)

STDOUT = "stdout"
STDERR = "stderr"


class OutputConsumer(Protocol):
    def on_text(self, text: str, stream: str) -> None: ...


class LanguageServiceProcess:
    """Owns one language service process at a time.

    Output lines are always logged and forwarded to the attached consumer,
    if any. ``configuration`` is read on every start, so changes made through
    :meth:`configure` apply from the next restart.
    """

    def __init__(self, command: Sequence[str], cwd: str | None = None, env: Mapping[str, str] | None = None) -> None:
        self.configuration = ServiceConfiguration(command=tuple(command), cwd=cwd, env=dict(env) if env else None)
        self._process: asyncio.subprocess.Process | None = None
        self._readers: list[asyncio.Task[None]] = []
        self._consumer: OutputConsumer | None = None

    def configure(
        self,
        *,
        command: Sequence[str] | None = None,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        if command is not None:
            if not command:
                raise ValueError("Language service command must not be empty.")
            self.configuration.command = tuple(command)
        if cwd is not None:
            self.configuration.cwd = cwd
        if env is not None:
            self.configuration.env = dict(env)

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def consumer(self) -> OutputConsumer | None:
        return self._consumer

    def attach(self, consumer: OutputConsumer) -> None:
        self._consumer = consumer

    def detach(self) -> None:
        self._consumer = None

    async def start(self) -> None:
        if self.running:
            return
        config = self.configuration
        env = {**os.environ, **config.env} if config.env else None
        process = await asyncio.create_subprocess_exec(
            *config.command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=config.cwd,
            env=env,
        )
        self._process = process
        self._readers = [
            asyncio.create_task(self._pump(process.stdout, STDOUT)),
            asyncio.create_task(self._pump(process.stderr, STDERR)),
        ]
        logger.info("Started language service %s (pid %s)", " ".join(config.command), process.pid)

    async def stop(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        if process.returncode is None:
            try:
                process.terminate()
                await asyncio.wait_for(process.wait(), timeout=LANGUAGE_SERVICE_STOP_TIMEOUT)
            except ProcessLookupError:
                pass
            except asyncio.TimeoutError:
                logger.warning("Language service pid %s ignored terminate; killing", process.pid)
                process.kill()
                await process.wait()
        readers, self._readers = self._readers, []
        for reader in readers:
            reader.cancel()
        await asyncio.gather(*readers, return_exceptions=True)
        logger.info("Stopped language service (pid %s, exit %s)", process.pid, process.returncode)

    async def restart(self) -> None:
        await self.stop()
        await self.start()

    async def _pump(self, stream: asyncio.StreamReader | None, name: str) -> None:
        if stream is None:
            return
        while True:
            line = await stream.readline()
            if not line:
                break
            text = line.decode("utf-8", errors="replace")
            logger.debug("[%s] %s", name, text.rstrip())
            consumer = self._consumer
            if consumer is None:
                continue
            try:
                consumer.on_text(text, name)
            except Exception:
                logger.exception("Output consumer failed on %s line", name)
