"""querydeck: run GraphQL queries against configured endpoints from the terminal."""

from .app import QueryDeck
from .endpoints import EndpointConfigProvider, EndpointRegistry
from .exceptions import EncodingError, QueryDeckError, RestartError, TransportError
from .executor import LoggingNotifier, QueryExecutor
from .language_service import LanguageServiceProcess
from .models import EndpointRecord, QueryFailure, QueryOutcome, QueryRequest, QueryResult, QuerySuccess
from .session import SessionBinding, SessionLink, TextDocument
from .summary import count_errors, describe, format_size
from .supervisor import ProcessSupervisor, ServiceConsole

__all__ = [
    "QueryDeck",
    "EndpointRecord",
    "EndpointRegistry",
    "EndpointConfigProvider",
    "SessionBinding",
    "SessionLink",
    "TextDocument",
    "QueryExecutor",
    "LoggingNotifier",
    "QueryRequest",
    "QueryResult",
    "QueryOutcome",
    "QuerySuccess",
    "QueryFailure",
    "count_errors",
    "describe",
    "format_size",
    "ProcessSupervisor",
    "ServiceConsole",
    "LanguageServiceProcess",
    "QueryDeckError",
    "EncodingError",
    "TransportError",
    "RestartError",
]

__version__ = "0.1.0"
