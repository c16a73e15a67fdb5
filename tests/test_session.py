# ruff: noqa: S101
from querydeck.models import EndpointRecord
from querydeck.session import SessionLink, TextDocument


def test_bind_selects_first_endpoint(session_link, query_document, endpoint):
    binding = session_link.bind(query_document)
    assert binding.selected_endpoint == endpoint
    assert binding.querying is False
    assert session_link.bind(query_document) is binding


def test_bind_without_endpoints_selects_nothing(query_document):
    from querydeck.endpoints import EndpointRegistry

    binding = SessionLink(EndpointRegistry()).bind(query_document)
    assert binding.selected_endpoint is None


def test_bindings_are_keyed_by_document_identity(session_link):
    first = TextDocument("same.graphql", "{ a }")
    second = TextDocument("same.graphql", "{ a }")

    assert session_link.bind(first) is not session_link.bind(second)
    assert len(session_link.bindings()) == 2


def test_unbind_forgets_binding(session_link, query_document):
    binding = session_link.bind(query_document)
    session_link.unbind(binding)
    session_link.unbind(binding)

    assert session_link.get(query_document) is None
    assert not session_link.is_bound(binding)


def test_texts(session_link, query_document):
    variables = TextDocument("vars.json", "   \n")
    binding = session_link.bind(query_document, variables)

    assert session_link.get_query_text(binding) == "{ a }"
    assert session_link.get_variables_text(binding) is None

    variables.text = '{"id": 1}'
    assert session_link.get_variables_text(binding) == '{"id": 1}'


def test_reload_without_selected_url_resets_selection(session_link, registry, query_document):
    other = TextDocument("other.graphql")
    first = session_link.bind(query_document)
    second = session_link.bind(other)
    session_link.set_selected_endpoint(second, registry.list()[1])

    registry.reload([EndpointRecord(url="http://y/gql")])

    assert first.selected_endpoint is None
    assert second.selected_endpoint is registry.list()[0]


def test_reload_resolves_selection_by_url(session_link, registry, query_document):
    binding = session_link.bind(query_document)
    replacement = EndpointRecord(url="http://x/gql", options={"headers": {"X-Token": "new"}})

    registry.reload([replacement])

    assert binding.selected_endpoint is replacement


def test_unbound_session_ignores_reload(session_link, registry, query_document, endpoint):
    binding = session_link.bind(query_document)
    session_link.unbind(binding)

    registry.reload([])

    assert binding.selected_endpoint == endpoint


def test_toggle_variables(session_link, query_document):
    binding = session_link.bind(query_document)
    assert session_link.toggle_variables(binding) is True
    assert session_link.toggle_variables(binding) is False
