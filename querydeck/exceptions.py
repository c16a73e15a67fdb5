class QueryDeckError(Exception):
    """Base class for querydeck failures."""


class EncodingError(QueryDeckError):
    """The request could not be built; nothing was sent."""


class TransportError(QueryDeckError):
    """The request was built but sending it failed."""


class RestartError(QueryDeckError):
    """The language service process could not be restarted."""
