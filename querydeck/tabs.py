import logging
from pathlib import Path

from textual.containers import Container, Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Log, Select, Static, TabPane, TextArea

from .config import VARIABLES_PLACEHOLDER
from .endpoints import EndpointRegistry
from .executor import QueryExecutor
from .models import EndpointRecord, QueryResult
from .parsing import parse_variables
from .session import SessionBinding, SessionLink
from .summary import describe, result_status
from .ui_components import SmallButton

STATUS_ICONS = {"ok": "✔", "error": "✖"}


class EditorDocument:
    """Document whose text lives in a TextArea once one is attached."""

    def __init__(self, name: str, text: str = "", language: str | None = None, path: Path | None = None) -> None:
        self.name = name
        self.language = language
        self.path = path
        self._text = text
        self._editor: TextArea | None = None

    @property
    def text(self) -> str:
        if self._editor is not None:
            return self._editor.text
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        self._text = value
        if self._editor is not None:
            self._editor.load_text(value)

    def attach(self, editor: TextArea) -> None:
        self._editor = editor


class QueryTab(TabPane):
    """One query editing session: endpoint picker, variables and query editors."""

    busy: reactive[bool] = reactive(False)
    logger = logging.getLogger(__name__)

    def __init__(
        self,
        document: EditorDocument,
        session_link: SessionLink,
        executor: QueryExecutor,
        *,
        id: str,
    ) -> None:
        super().__init__(document.name, id=id)
        self.document = document
        self.variables = EditorDocument(f"{document.name}.variables.json", language="json")
        self.session_link = session_link
        self.executor = executor
        self.binding: SessionBinding | None = None

    @property
    def registry(self) -> EndpointRegistry:
        return self.session_link.registry

    def _wid(self, name: str) -> str:
        return f"{self.id}-{name}"

    def compose(self):
        with Vertical(classes="session"):
            with Horizontal(classes="editor-header"):
                yield Select(
                    _endpoint_options(self.registry.list()),
                    prompt="GraphQL endpoint",
                    id=self._wid("endpoint"),
                    classes="endpoint-select",
                )
                yield SmallButton("Run", id=self._wid("run"), variant="primary")
                yield SmallButton("Variables", id=self._wid("toggle-variables"), variant="ghost")
            variables = TextArea(
                "",
                language="json",
                id=self._wid("variables"),
                classes="box vars-box",
            )
            variables.border_title = VARIABLES_PLACEHOLDER
            variables.display = False
            yield variables
            yield TextArea(
                self.document.text,
                id=self._wid("query"),
                show_line_numbers=True,
                classes="box query-box",
            )
            yield Static("", id=self._wid("status"), classes="status")

    def on_mount(self) -> None:
        self.document.attach(self._textarea("query"))
        self.variables.attach(self._textarea("variables"))
        self.binding = self.session_link.bind(self.document, self.variables)
        self.refresh_endpoints(self.registry.list())

    def on_unmount(self) -> None:
        if self.binding is not None:
            self.session_link.unbind(self.binding)
            self.binding = None

    def watch_busy(self, busy: bool) -> None:
        button = self._button("run")
        button.disabled = busy
        button.set_variant("warning" if busy else "primary")
        self._set_status("Querying..." if busy else "")

    def refresh_endpoints(self, endpoints: tuple[EndpointRecord, ...]) -> None:
        select = self._select()
        select.set_options(_endpoint_options(endpoints))
        selected = None
        if self.binding is not None:
            self.binding.reselect(endpoints)
            selected = self.binding.selected_endpoint
        if selected is None:
            select.clear()
        else:
            select.value = selected.url

    def on_select_changed(self, event: Select.Changed) -> None:
        if self.binding is None or event.select.id != self._wid("endpoint"):
            return
        value = event.value
        record = None if value is Select.BLANK else self.registry.find(str(value))
        self.session_link.set_selected_endpoint(self.binding, record)

    def run_query(self) -> None:
        if self.binding is None:
            return
        future = self.executor.execute(self.binding)
        if future is None:
            if self.binding.selected_endpoint is None:
                self._set_status("Select an endpoint to run the query.")
            else:
                self.logger.debug("Run ignored for %s; a query is already in flight", self.document.name)
            return
        if future.done():
            return
        self.busy = True
        future.add_done_callback(lambda _: setattr(self, "busy", False))

    def toggle_variables(self) -> None:
        if self.binding is None:
            return
        visible = self.session_link.toggle_variables(self.binding)
        editor = self._textarea("variables")
        editor.display = visible
        if visible:
            editor.focus()

    def revalidate(self) -> None:
        """Refresh the status line after the language service restarted.

        Only the variables editor is checked here, for being a JSON object;
        the query itself is left to the language service.
        """
        try:
            parse_variables(self.variables.text)
        except ValueError as exc:
            self.logger.info("Variables of %s are not a JSON object: %s", self.document.name, exc)
            self._set_status(f"Variables are not a valid JSON object: {exc}")
            return
        self._set_status(f"{self.document.name}: language service reconnected.")

    def focus_query(self) -> None:
        self._textarea("query").focus()

    def on_button_pressed(self, event: SmallButton.Pressed) -> None:
        if event.button.id == self._wid("run"):
            self.run_query()
        elif event.button.id == self._wid("toggle-variables"):
            self.toggle_variables()

    def _textarea(self, name: str) -> TextArea:
        return self.query_one(f"#{self._wid(name)}", TextArea)

    def _select(self) -> Select:
        return self.query_one(f"#{self._wid('endpoint')}", Select)

    def _button(self, name: str) -> SmallButton:
        return self.query_one(f"#{self._wid(name)}", SmallButton)

    def _set_status(self, message: str) -> None:
        self.query_one(f"#{self._wid('status')}", Static).update(message)


class ResultPanel(Container):
    """Query result: success indicator, summary line and the raw body."""

    def compose(self):
        with Horizontal(classes="result-header"):
            yield Static("", id="result-status", classes="result-status")
            yield Static("", id="result-summary", classes="status")
        yield TextArea("", language="json", id="result-body", read_only=True, classes="box response-box")

    def show(self, result: QueryResult) -> None:
        status = result_status(result.error_count)
        indicator = self.query_one("#result-status", Static)
        indicator.display = status is not None
        indicator.update(STATUS_ICONS.get(status or "", ""))
        indicator.set_class(status == "error", "-error")
        self.query_one("#result-summary", Static).update(describe(result))
        body = self.query_one("#result-body", TextArea)
        body.load_text(result.raw_body)
        body.scroll_home(animate=False)


class ConsolePanel(Container):
    """Language service output."""

    def compose(self):
        yield Log(id="console-log", classes="box console-log", max_lines=1000)

    def write(self, text: str) -> None:
        self.query_one("#console-log", Log).write(text)


def _endpoint_options(endpoints: tuple[EndpointRecord, ...]) -> list[tuple[str, str]]:
    seen: set[str] = set()
    options: list[tuple[str, str]] = []
    for record in endpoints:
        if record.url in seen:
            continue
        seen.add(record.url)
        options.append((record.label, record.url))
    return options
