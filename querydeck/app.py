from collections.abc import Sequence

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, TabbedContent, TabPane

from .config import RESTART_NOTIFICATION_TITLE, SCRATCH_NAME
from .endpoints import EndpointConfigProvider, EndpointRegistry
from .exceptions import RestartError
from .executor import QueryExecutor
from .http_client import ClientFactory
from .language_service import LanguageServiceProcess
from .models import EndpointRecord, QueryResult
from .session import Document, SessionLink
from .supervisor import ProcessSupervisor, ServiceConsole
from .tabs import ConsolePanel, EditorDocument, QueryTab, ResultPanel


class AppNotifier:
    """Routes executor notifications to Textual toasts."""

    def __init__(self, app: App) -> None:
        self.app = app

    def notify(self, message: str, *, title: str = "", severity: str = "information") -> None:
        self.app.notify(escape(message), title=title, severity=severity)  # type: ignore[arg-type]


class QueryDeck(App[None]):
    """Terminal GraphQL query editor backed by a language service process."""

    TITLE = "querydeck"

    CSS = """
    Screen {
        background: #0b1221;
    }

    #editors {
        height: 3fr;
    }

    #tool-window {
        height: 2fr;
        border-top: tall #1f2d4a;
    }

    TabbedContent, TabPane {
        height: 1fr;
    }

    .session {
        height: 1fr;
        padding: 0 1;
        background: #0f182b;
    }

    .editor-header {
        height: 3;
        align-vertical: middle;
    }

    .endpoint-select {
        width: 1fr;
        max-width: 80;
        margin-right: 1;
    }

    .editor-header SmallButton {
        margin-right: 1;
    }

    .box {
        border: round #22345b;
        background: #0b1529;
    }

    .vars-box {
        height: 6;
    }

    .query-box {
        height: 1fr;
    }

    .response-box, .console-log {
        height: 1fr;
        scrollbar-size-vertical: 1;
        scrollbar-color: #4f8dff;
        scrollbar-background: #0b1221;
    }

    .status {
        color: #87d7ff;
        padding: 0 1;
    }

    .result-header {
        height: 1;
    }

    .result-status {
        width: 2;
        color: #5fd787;
    }

    .result-status.-error {
        color: #ff5f5f;
    }
    """

    BINDINGS = [
        Binding("ctrl+s", "run_query", "Run query"),
        Binding("f5", "run_query", "Run query"),
        Binding("ctrl+t", "toggle_variables", "Variables"),
        Binding("ctrl+e", "reload_endpoints", "Reload endpoints"),
        Binding("ctrl+r", "restart_language_service", "Restart language service"),
        Binding("ctrl+w", "close_tab", "Close tab"),
        Binding("f12", "quit", "Quit"),
    ]

    def __init__(
        self,
        documents: Sequence[EditorDocument] = (),
        registry: EndpointRegistry | None = None,
        provider: EndpointConfigProvider | None = None,
        language_service: LanguageServiceProcess | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        super().__init__()
        self.documents = list(documents) or [EditorDocument(SCRATCH_NAME, language="graphql")]
        self.registry = registry or (provider.registry if provider else EndpointRegistry())
        self.provider = provider
        self.session_link = SessionLink(self.registry)
        self.executor = QueryExecutor(self.session_link, self, AppNotifier(self), client_factory)
        self.console = ServiceConsole(write=self._write_console, reveal=self.show_console)
        self.supervisor = (
            ProcessSupervisor(language_service, self.console, workspace=self, analyzer=self)
            if language_service is not None
            else None
        )
        self._tab_counter = 0

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="main"):
            with TabbedContent(id="editors"):
                for document in self.documents:
                    yield self._new_tab(document)
            with TabbedContent(id="tool-window"):
                with TabPane("Query result", id="result"):
                    yield ResultPanel(id="result-panel")
                with TabPane("Console", id="console"):
                    yield ConsolePanel(id="console-panel")
        yield Footer()

    def on_mount(self) -> None:
        self.registry.subscribe(self._on_endpoints_reloaded)
        if self.provider is not None:
            self.run_worker(self.provider.watch(), group="config", exclusive=True)
        if self.supervisor is not None:
            self.run_worker(self._start_language_service(), group="language-service")
        tab = self._active_tab()
        if tab is not None:
            tab.focus_query()

    async def on_unmount(self) -> None:
        self.registry.unsubscribe(self._on_endpoints_reloaded)
        if self.supervisor is not None:
            await self.supervisor.shutdown()

    # -- result sink --

    def show_result(self, result: QueryResult) -> None:
        self.query_one("#result-panel", ResultPanel).show(result)
        self.query_one("#tool-window", TabbedContent).active = "result"

    def show_console(self) -> None:
        self.query_one("#tool-window", TabbedContent).active = "console"

    # -- workspace / analyzer --

    def active_document(self) -> Document | None:
        tab = self._active_tab()
        return tab.document if tab is not None else None

    def revalidate(self, document: Document) -> None:
        for tab in self.query(QueryTab):
            if tab.document is document:
                tab.revalidate()

    # -- actions --

    def action_run_query(self) -> None:
        tab = self._active_tab()
        if tab is not None:
            tab.run_query()

    def action_toggle_variables(self) -> None:
        tab = self._active_tab()
        if tab is not None:
            tab.toggle_variables()

    def action_reload_endpoints(self) -> None:
        if self.provider is None:
            self.notify("No endpoint configuration file.", severity="warning")
            return
        if self.provider.load():
            self.notify(f"Loaded {len(self.registry.list())} endpoint(s).")
        else:
            self.notify(f"Could not load {escape(str(self.provider.path))}.", severity="error")

    def action_restart_language_service(self) -> None:
        if self.supervisor is None:
            self.notify("No language service configured.", severity="warning")
            return
        self.run_worker(self._restart_language_service(), group="language-service")

    async def action_close_tab(self) -> None:
        tab = self._active_tab()
        if tab is not None:
            await self.query_one("#editors", TabbedContent).remove_pane(tab.id or "")

    # -- implementation --

    async def _start_language_service(self) -> None:
        try:
            await self.supervisor.start()  # type: ignore[union-attr]
        except RestartError as exc:
            self._report_restart_failure(exc)

    async def _restart_language_service(self) -> None:
        try:
            restarted = await self.supervisor.restart()  # type: ignore[union-attr]
        except RestartError as exc:
            self._report_restart_failure(exc)
            return
        if not restarted:
            self.notify("Language service restart already in progress.", title=RESTART_NOTIFICATION_TITLE)

    def _report_restart_failure(self, exc: RestartError) -> None:
        self._write_console(f"{exc}\n")
        self.show_console()
        self.notify(escape(str(exc)), title=RESTART_NOTIFICATION_TITLE, severity="error")

    def _write_console(self, text: str) -> None:
        self.query_one("#console-panel", ConsolePanel).write(text)

    def _on_endpoints_reloaded(self, endpoints: tuple[EndpointRecord, ...]) -> None:
        for tab in self.query(QueryTab):
            tab.refresh_endpoints(endpoints)

    def _new_tab(self, document: EditorDocument) -> QueryTab:
        self._tab_counter += 1
        return QueryTab(document, self.session_link, self.executor, id=f"query-{self._tab_counter}")

    def _active_tab(self) -> QueryTab | None:
        tabs = self.query_one("#editors", TabbedContent)
        pane = tabs.active_pane
        return pane if isinstance(pane, QueryTab) else None
