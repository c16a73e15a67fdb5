# ruff: noqa: S101
import asyncio
import json

import httpx
import pytest

from querydeck.exceptions import EncodingError, TransportError
from querydeck.executor import QueryExecutor
from querydeck.models import EndpointRecord, QueryFailure, QuerySuccess
from querydeck.session import TextDocument


def _executor(session_link, sink, notifier, transport):
    return QueryExecutor(session_link, sink, notifier, client_factory=transport.client_factory)


@pytest.mark.asyncio
async def test_execute_posts_query_with_endpoint_headers(session_link, sink, notifier, transport, query_document):
    binding = session_link.bind(query_document)
    executor = _executor(session_link, sink, notifier, transport)

    outcome = await executor.execute(binding)

    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://x/gql"
    assert request.content == b'{"query":"{ a }"}'
    assert json.loads(request.content) == {"query": "{ a }"}
    assert request.headers["X-Token"] == "abc"
    assert request.headers["Content-Type"] == "application/json"
    assert isinstance(outcome, QuerySuccess)
    assert outcome.error_count == 0
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_execute_delivers_summary_to_sink(session_link, sink, notifier, transport, query_document):
    transport.text = '{"errors":[{"message":"x"},{"message":"y"}]}'
    binding = session_link.bind(query_document)

    await _executor(session_link, sink, notifier, transport).execute(binding)

    result = sink.results[0]
    assert result.source == "query.graphql"
    assert result.endpoint_url == "http://x/gql"
    assert result.raw_body == transport.text
    assert result.size_bytes == len(transport.text)
    assert result.error_count == 2
    assert result.elapsed_ms >= 0


@pytest.mark.asyncio
async def test_non_json_response_is_still_delivered(session_link, sink, notifier, transport, query_document):
    transport.text = "<html>Bad Gateway</html>"
    transport.status_code = 502
    binding = session_link.bind(query_document)

    outcome = await _executor(session_link, sink, notifier, transport).execute(binding)

    assert outcome.error_count is None
    assert sink.results[0].raw_body == "<html>Bad Gateway</html>"
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_variables_are_embedded_as_json(session_link, sink, notifier, transport, query_document):
    variables = TextDocument("vars.json", '{"id": 7, "name": "Zoë"}')
    binding = session_link.bind(query_document, variables)

    await _executor(session_link, sink, notifier, transport).execute(binding)

    body = json.loads(transport.requests[0].content.decode("utf-8"))
    assert body == {"query": "{ a }", "variables": {"id": 7, "name": "Zoë"}}


@pytest.mark.asyncio
async def test_execute_without_selected_endpoint_is_a_no_op(session_link, sink, notifier, transport, query_document):
    binding = session_link.bind(query_document)
    session_link.set_selected_endpoint(binding, None)

    assert _executor(session_link, sink, notifier, transport).execute(binding) is None
    assert transport.requests == []
    assert sink.results == []
    assert notifier.calls == []


@pytest.mark.asyncio
async def test_execute_with_empty_url_is_a_no_op(session_link, sink, notifier, transport, query_document):
    binding = session_link.bind(query_document)
    session_link.set_selected_endpoint(binding, EndpointRecord(url=""))

    assert _executor(session_link, sink, notifier, transport).execute(binding) is None
    assert transport.requests == []


@pytest.mark.asyncio
async def test_invalid_variables_fail_before_sending(session_link, sink, notifier, transport, query_document):
    binding = session_link.bind(query_document, TextDocument("vars.json", "{not json"))

    future = _executor(session_link, sink, notifier, transport).execute(binding)

    assert future is not None and future.done()
    outcome = future.result()
    assert isinstance(outcome, QueryFailure)
    assert isinstance(outcome.reason, EncodingError)
    assert binding.querying is False
    assert transport.requests == []
    severity, title, message = notifier.calls[0]
    assert severity == "error"
    assert title == "GraphQL Query Error"
    assert message.startswith("http://x/gql: ")


@pytest.mark.asyncio
async def test_unsupported_scheme_is_an_encoding_error(session_link, sink, notifier, transport, query_document):
    binding = session_link.bind(query_document)
    session_link.set_selected_endpoint(binding, EndpointRecord(url="ftp://x/gql"))

    outcome = await _executor(session_link, sink, notifier, transport).execute(binding)

    assert isinstance(outcome.reason, EncodingError)
    assert "Unsupported URL scheme" in notifier.calls[0][2]


@pytest.mark.asyncio
async def test_unencodable_header_is_an_encoding_error(session_link, sink, notifier, transport, query_document):
    binding = session_link.bind(query_document)
    session_link.set_selected_endpoint(
        binding, EndpointRecord(url="http://x/gql", options={"headers": {"X-Name": "Zoë ☃"}})
    )

    outcome = await _executor(session_link, sink, notifier, transport).execute(binding)

    assert isinstance(outcome.reason, EncodingError)
    assert transport.requests == []


@pytest.mark.asyncio
async def test_transport_failure_is_a_warning(session_link, sink, notifier, transport, query_document):
    transport.error = httpx.ConnectError("connection refused")
    binding = session_link.bind(query_document)

    outcome = await _executor(session_link, sink, notifier, transport).execute(binding)

    assert isinstance(outcome, QueryFailure)
    assert isinstance(outcome.reason, TransportError)
    assert binding.querying is False
    assert sink.results == []
    assert notifier.calls == [("warning", "GraphQL Query Error", "http://x/gql: connection refused")]


@pytest.mark.asyncio
async def test_querying_flag_rejects_overlapping_execute(session_link, sink, notifier, transport, query_document):
    transport.gate = asyncio.Event()
    binding = session_link.bind(query_document)
    executor = _executor(session_link, sink, notifier, transport)

    first = executor.execute(binding)
    assert binding.querying is True
    assert executor.execute(binding) is None
    assert executor.pending == 1

    transport.gate.set()
    await first

    assert binding.querying is False
    assert len(transport.requests) == 1
    assert len(sink.results) == 1


@pytest.mark.asyncio
async def test_closed_session_drops_the_result(session_link, sink, notifier, transport, query_document):
    transport.gate = asyncio.Event()
    binding = session_link.bind(query_document)
    future = _executor(session_link, sink, notifier, transport).execute(binding)

    session_link.unbind(binding)
    transport.gate.set()
    outcome = await future

    assert isinstance(outcome, QuerySuccess)
    assert sink.results == []


@pytest.mark.asyncio
async def test_configured_content_type_wins(session_link, sink, notifier, transport, query_document):
    binding = session_link.bind(query_document)
    session_link.set_selected_endpoint(
        binding,
        EndpointRecord(url="http://x/gql", options={"headers": {"content-type": "application/graphql+json", "N": 1}}),
    )

    await _executor(session_link, sink, notifier, transport).execute(binding)

    headers = transport.requests[0].headers
    assert headers.get_list("Content-Type") == ["application/graphql+json"]
    assert headers["N"] == "1"


@pytest.mark.asyncio
async def test_join_waits_for_all_sessions(session_link, sink, notifier, transport):
    executor = _executor(session_link, sink, notifier, transport)
    for name in ("a.graphql", "b.graphql"):
        executor.execute(session_link.bind(TextDocument(name, "{ a }")))

    await executor.join()

    assert executor.pending == 0
    assert sorted(result.source for result in sink.results) == ["a.graphql", "b.graphql"]


@pytest.mark.asyncio
async def test_deeply_nested_body_is_delivered_with_unknown_errors(
    session_link, sink, notifier, transport, query_document
):
    transport.text = '{"data":' + "[" * 100000
    binding = session_link.bind(query_document)

    outcome = await _executor(session_link, sink, notifier, transport).execute(binding)

    assert isinstance(outcome, QuerySuccess)
    assert outcome.error_count is None
    assert sink.results[0].raw_body == transport.text
    assert sink.results[0].error_count is None
    assert binding.querying is False
    assert notifier.calls == []
