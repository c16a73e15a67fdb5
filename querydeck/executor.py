"""Runs the query of a session against its selected endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import httpx

from .config import NOTIFICATION_TITLE
from .exceptions import EncodingError, QueryDeckError, TransportError
from .http_client import ClientFactory, build_request, perform_request
from .models import EndpointRecord, QueryFailure, QueryOutcome, QueryRequest, QueryResult, QuerySuccess
from .session import SessionBinding, SessionLink
from .summary import count_errors

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, message: str, *, title: str = "", severity: str = "information") -> None: ...


class ResultSink(Protocol):
    def show_result(self, result: QueryResult) -> None: ...


class LoggingNotifier:
    """Notifier for headless use: notifications become log records."""

    LEVELS = {"error": logging.ERROR, "warning": logging.WARNING}

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def notify(self, message: str, *, title: str = "", severity: str = "information") -> None:
        self.log.log(self.LEVELS.get(severity, logging.INFO), "%s: %s", title, message)


class QueryExecutor:
    """Sends one request per :meth:`execute` call without blocking the caller.

    Successful responses go to the single result sink; failures become
    notifications. A session that is still waiting for a response rejects
    further executions until it completes.
    """

    def __init__(
        self,
        session_link: SessionLink,
        sink: ResultSink,
        notifier: Notifier,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self.session_link = session_link
        self.sink = sink
        self.notifier = notifier
        self.client_factory = client_factory
        self._tasks: set[asyncio.Task[QueryOutcome]] = set()

    def execute(self, binding: SessionBinding) -> asyncio.Future[QueryOutcome] | None:
        endpoint = binding.selected_endpoint
        if endpoint is None or not endpoint.url:
            return None
        if binding.querying:
            logger.debug("Query already running for %s; ignoring execute", binding.query_document.name)
            return None

        loop = asyncio.get_running_loop()
        request = QueryRequest(
            query_text=self.session_link.get_query_text(binding),
            variables_text=self.session_link.get_variables_text(binding),
        )
        try:
            http_request = build_request(endpoint, request)
        except EncodingError as exc:
            self._report(endpoint, exc, "error")
            failed: asyncio.Future[QueryOutcome] = loop.create_future()
            failed.set_result(QueryFailure(exc))
            return failed

        binding.querying = True
        task = loop.create_task(self._dispatch(binding, endpoint, http_request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def join(self) -> None:
        """Wait for every query still in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _dispatch(
        self, binding: SessionBinding, endpoint: EndpointRecord, http_request: httpx.Request
    ) -> QueryOutcome:
        logger.debug("POST %s for %s", endpoint.url, binding.query_document.name)
        try:
            response = await perform_request(http_request, self.client_factory)
        except TransportError as exc:
            self._report(endpoint, exc, "warning")
            return QueryFailure(exc)
        finally:
            binding.querying = False

        outcome = QuerySuccess(
            raw_body=response.text,
            elapsed_ms=response.duration_ms,
            error_count=count_errors(response.text),
        )
        logger.debug("HTTP %s from %s in %.1f ms", response.status, endpoint.url, response.duration_ms)
        self._deliver(binding, endpoint, outcome)
        return outcome

    def _deliver(self, binding: SessionBinding, endpoint: EndpointRecord, outcome: QuerySuccess) -> None:
        if not self.session_link.is_bound(binding):
            logger.debug("Session for %s closed before its response arrived", binding.query_document.name)
            return
        self.sink.show_result(
            QueryResult(
                source=binding.query_document.name,
                endpoint_url=endpoint.url,
                raw_body=outcome.raw_body,
                elapsed_ms=outcome.elapsed_ms,
                size_bytes=len(outcome.raw_body.encode("utf-8", errors="replace")),
                error_count=outcome.error_count,
            )
        )

    def _report(self, endpoint: EndpointRecord, exc: QueryDeckError, severity: str) -> None:
        logger.log(logging.ERROR if severity == "error" else logging.WARNING, "%s: %s", endpoint.url, exc)
        self.notifier.notify(f"{endpoint.url}: {exc}", title=NOTIFICATION_TITLE, severity=severity)
