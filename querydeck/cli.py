from __future__ import annotations

import argparse
import asyncio
import logging
import shlex
import shutil
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from .app import QueryDeck
from .config import CONFIG_FILE_NAME, DEFAULT_LANGUAGE_SERVICE_COMMAND, GRAPHQL_LANGUAGE
from .endpoints import EndpointConfigProvider, EndpointRegistry
from .executor import LoggingNotifier, QueryExecutor
from .http_client import ClientFactory
from .language_service import LanguageServiceProcess
from .logging_setup import configure_logging
from .models import QueryResult, QuerySuccess
from .parsing import endpoints_from_args
from .session import SessionLink, TextDocument
from .storage import resolve_config_path
from .summary import describe
from .tabs import EditorDocument

logger = logging.getLogger(__name__)


class PrintingSink:
    """Result sink for ``--run``: body to stdout, summary to stderr."""

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def show_result(self, result: QueryResult) -> None:
        print(result.raw_body, file=self.out)
        print(describe(result), file=self.err)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="querydeck", description="GraphQL query editor for the terminal.")
    parser.add_argument("files", nargs="*", type=Path, help="GraphQL query files to open.")
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Endpoint configuration file (default: ./{CONFIG_FILE_NAME}, then the user config dir).",
    )
    parser.add_argument(
        "--endpoint",
        action="append",
        default=[],
        metavar="URL",
        help="Extra endpoint listed before the configured ones. Repeatable.",
    )
    parser.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="'KEY: VALUE'",
        help="Header sent to every --endpoint. Repeatable.",
    )
    parser.add_argument("--variables", type=Path, help="JSON variables file used with --run.")
    parser.add_argument(
        "--run",
        action="store_true",
        help="Execute the first query file against the first endpoint and print the response.",
    )
    parser.add_argument("--language-service", metavar="COMMAND", help="Command line of the language service.")
    parser.add_argument("--no-language-service", action="store_true", help="Do not start a language service.")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to querydeck.log in the current directory.",
    )
    parser.add_argument(
        "--no-service-log",
        action="store_true",
        help="With --debug, leave language service output lines out of the log file.",
    )
    return parser.parse_args(argv)


async def run_headless(
    files: Sequence[Path],
    variables_path: Path | None,
    registry: EndpointRegistry,
    client_factory: ClientFactory | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    err = err or sys.stderr
    if not files:
        print("querydeck: --run needs a query file.", file=err)
        return 2
    if not registry.list():
        print("querydeck: no endpoint configured.", file=err)
        return 2
    try:
        query = TextDocument.from_path(files[0], language=GRAPHQL_LANGUAGE)
        variables = TextDocument.from_path(variables_path, language="json") if variables_path else None
    except OSError as exc:
        print(f"querydeck: {exc}", file=err)
        return 2

    session_link = SessionLink(registry)
    binding = session_link.bind(query, variables)
    executor = QueryExecutor(session_link, PrintingSink(out, err), LoggingNotifier(logger), client_factory)
    future = executor.execute(binding)
    if future is None:
        print(f"querydeck: endpoint {registry.list()[0].label!r} has no URL.", file=err)
        return 2
    outcome = await future
    return 0 if isinstance(outcome, QuerySuccess) else 1


def language_service_from_args(args: argparse.Namespace) -> LanguageServiceProcess | None:
    if args.no_language_service:
        return None
    if args.language_service:
        return LanguageServiceProcess(shlex.split(args.language_service), cwd=str(Path.cwd()))
    if shutil.which(DEFAULT_LANGUAGE_SERVICE_COMMAND[0]) is None:
        logger.info("%s not found; running without a language service", DEFAULT_LANGUAGE_SERVICE_COMMAND[0])
        return None
    return LanguageServiceProcess(DEFAULT_LANGUAGE_SERVICE_COMMAND, cwd=str(Path.cwd()))


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    log_path = configure_logging(args.debug, service_output=not args.no_service_log)
    if args.debug and log_path is None:
        logger.warning("Debug logging requested but log file could not be created.")

    try:
        extra = endpoints_from_args(args.endpoint, args.header)
    except ValueError as exc:
        print(f"querydeck: {exc}", file=sys.stderr)
        return 2

    registry = EndpointRegistry()
    provider = EndpointConfigProvider(registry, resolve_config_path(args.config), extra)
    provider.load()

    if args.run:
        return asyncio.run(run_headless(args.files, args.variables, registry))

    try:
        documents = [
            EditorDocument(path.name, path.read_text(encoding="utf-8"), language=GRAPHQL_LANGUAGE, path=path)
            for path in args.files
        ]
    except OSError as exc:
        print(f"querydeck: {exc}", file=sys.stderr)
        return 2
    QueryDeck(documents, registry, provider, language_service_from_args(args)).run()
    return 0
