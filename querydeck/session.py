"""Bindings between open query documents, variables and endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .endpoints import EndpointRegistry
from .models import EndpointRecord

logger = logging.getLogger(__name__)


class Document(Protocol):
    name: str
    text: str


@dataclass(eq=False)
class TextDocument:
    name: str
    text: str = ""
    language: str | None = None
    path: Path | None = None

    @classmethod
    def from_path(cls, path: Path, language: str | None = None) -> TextDocument:
        return cls(name=path.name, text=path.read_text(encoding="utf-8"), language=language, path=path)


@dataclass(eq=False)
class SessionBinding:
    query_document: Document
    variables_document: Document | None = None
    selected_endpoint: EndpointRecord | None = None
    querying: bool = False
    variables_visible: bool = False

    def reselect(self, endpoints: tuple[EndpointRecord, ...]) -> None:
        """Point the selection at the reloaded record with the same URL, or at nothing."""
        if self.selected_endpoint is None:
            return
        url = self.selected_endpoint.url
        self.selected_endpoint = next((record for record in endpoints if record.url == url), None)
        if self.selected_endpoint is None:
            logger.debug("Endpoint %s disappeared; %s has no selection", url, self.query_document.name)


class SessionLink:
    """Owns every :class:`SessionBinding`, keyed by query document identity."""

    def __init__(self, registry: EndpointRegistry) -> None:
        self.registry = registry
        self._bindings: dict[int, SessionBinding] = {}

    def bind(self, query_document: Document, variables_document: Document | None = None) -> SessionBinding:
        existing = self.get(query_document)
        if existing is not None:
            return existing
        endpoints = self.registry.list()
        binding = SessionBinding(
            query_document=query_document,
            variables_document=variables_document,
            selected_endpoint=endpoints[0] if endpoints else None,
        )
        self._bindings[id(query_document)] = binding
        self.registry.subscribe(binding.reselect)
        logger.debug("Bound session for %s", query_document.name)
        return binding

    def unbind(self, binding: SessionBinding) -> None:
        key = id(binding.query_document)
        if self._bindings.get(key) is not binding:
            return
        del self._bindings[key]
        self.registry.unsubscribe(binding.reselect)
        logger.debug("Unbound session for %s", binding.query_document.name)

    def get(self, query_document: Document) -> SessionBinding | None:
        return self._bindings.get(id(query_document))

    def is_bound(self, binding: SessionBinding) -> bool:
        return self._bindings.get(id(binding.query_document)) is binding

    def bindings(self) -> list[SessionBinding]:
        return list(self._bindings.values())

    def get_query_text(self, binding: SessionBinding) -> str:
        return binding.query_document.text

    def get_variables_text(self, binding: SessionBinding) -> str | None:
        document = binding.variables_document
        if document is None:
            return None
        text = document.text
        return text if text.strip() else None

    def set_selected_endpoint(self, binding: SessionBinding, record: EndpointRecord | None) -> None:
        binding.selected_endpoint = record

    def toggle_variables(self, binding: SessionBinding) -> bool:
        binding.variables_visible = not binding.variables_visible
        return binding.variables_visible
