"""Command-line entry point for one-off ingestion and agent questions.

Usage::

    python -m shadowsync.cli ingest "Met Bob at the launch review"
    python -m shadowsync.cli ask "Who did I meet?" --context "Met Bob at the launch review"

State lives only for the duration of the command, so ``ask`` accepts
``--context`` (repeatable) to ingest some text first.  The same
components as the web app are built; scheduled events are drained before
printing so the event list is complete.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

from shadowsync.config.loader import load_config
from shadowsync.config.settings import Settings
from shadowsync.pipeline.orchestrator import IngestionOrchestrator, IngestStatus
from shadowsync.utils.errors import ConfigurationError


def _build_components(app_settings: Settings) -> dict[str, Any]:
    # Deferred: importing the app module configures logging and builds the app.
    from shadowsync.main import _build_all

    return _build_all(app_settings, load_config(settings=app_settings))


def _print_summary(components: dict[str, Any]) -> None:
    knowledge_store = components["knowledge_store"]
    vector_store = components["vector_store"]

    print(f"Nodes:   {knowledge_store.node_count}")
    for node in knowledge_store.nodes():
        print(f"  - {node.label} ({node.type.value})")
    print(f"Links:   {knowledge_store.edge_count}")
    for link in knowledge_store.edges():
        print(f"  - {link.source} --{link.relation}--> {link.target}")
    print(f"Vectors: {vector_store.count}")
    for point in vector_store.points():
        print(f"  - [{point.x:.1f}, {point.y:.1f}] {point.category}")
    print("Events:")
    for event in reversed(components["event_log"].list()):
        print(f"  {event.timestamp:%H:%M:%S} {event.type.value:<8} {event.message}")


async def _ingest_all(orchestrator: IngestionOrchestrator, texts: list[str]) -> bool:
    ok = True
    for text in texts:
        status = await orchestrator.ingest(text)
        if status is not IngestStatus.STORED:
            print(f"Ingestion {status.value}: {text[:60]!r}", file=sys.stderr)
            ok = False
    await orchestrator.drain()
    return ok


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_ingest(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Ingest each text argument, then print the store contents."""
    orchestrator: IngestionOrchestrator = components["orchestrator"]
    ok = await _ingest_all(orchestrator, args.text)
    _print_summary(components)
    return 0 if ok else 1


async def _handle_ask(args: argparse.Namespace, components: dict[str, Any]) -> int:
    """Optionally ingest ``--context`` texts, then ask the agent."""
    if args.context:
        await _ingest_all(components["orchestrator"], args.context)

    reply = await components["context_agent"].handle_query(args.question)
    if reply is None:
        print("Question must not be blank.", file=sys.stderr)
        return 1
    print(reply.content)
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m shadowsync.cli",
        description="ShadowSync context engine: ingest text or ask the context agent.",
    )
    subparsers = parser.add_subparsers(dest="command")

    ingest = subparsers.add_parser("ingest", help="Extract and store context from text")
    ingest.add_argument("text", nargs="+", help="One or more pieces of text to ingest")

    ask = subparsers.add_parser("ask", help="Ask the context agent a question")
    ask.add_argument("question", help="The question to ask")
    ask.add_argument(
        "--context",
        action="append",
        default=[],
        metavar="TEXT",
        help="Text to ingest before asking (repeatable)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point; exits with the handler's status code."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    try:
        components = _build_components(app_settings)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        sys.exit(2)

    if not components["llm"].is_available():
        print(
            "Warning: no LLM credential configured "
            "(set ANTHROPIC_API_KEY, OPENAI_API_KEY or OLLAMA_BASE_URL).",
            file=sys.stderr,
        )

    handlers = {"ingest": _handle_ingest, "ask": _handle_ask}
    sys.exit(asyncio.run(handlers[args.command](args, components)))


if __name__ == "__main__":
    main()
