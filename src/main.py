# src/main.py — v2
"""CLI entry point — run, plan, validate, agents, chat commands.

Usage:
    agentmux run <chain.json> --input "text" [--no-summary]
    agentmux plan "<request>"
    agentmux validate <chain.json>
    agentmux agents
    agentmux chat
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from agentmux.config.settings import ConfigurationError, Settings, load_settings
from agentmux.logging.logger import setup_logging
from agentmux.version import __version__

logger = logging.getLogger(__name__)

_EXIT_COMMANDS = {"exit", "quit"}


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = load_settings()
    except (ConfigurationError, ValueError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="agentmux",
        description=f"agentmux v{__version__} — declarative agent chains over a local LLM",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- run ---
    p_run = subparsers.add_parser("run", help="Execute a chain file")
    p_run.add_argument("chain", type=Path, help="Path to chain JSON")
    p_run.add_argument("-i", "--input", required=True, help="Initial user input")
    p_run.add_argument(
        "--no-summary", action="store_true",
        help="Do not append the run summary report",
    )
    p_run.set_defaults(func=_cmd_run)

    # --- plan ---
    p_plan = subparsers.add_parser("plan", help="Plan and execute a chain for a request")
    p_plan.add_argument("request", help="Natural-language request")
    p_plan.set_defaults(func=_cmd_plan)

    # --- validate ---
    p_validate = subparsers.add_parser("validate", help="Validate a chain file")
    p_validate.add_argument("chain", type=Path, help="Path to chain JSON")
    p_validate.set_defaults(func=_cmd_validate)

    # --- agents ---
    p_agents = subparsers.add_parser("agents", help="List registered agents")
    p_agents.set_defaults(func=_cmd_agents)

    # --- chat ---
    p_chat = subparsers.add_parser("chat", help="Interactive prompt against the LLM")
    p_chat.set_defaults(func=_cmd_chat)

    return parser


async def _cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute a chain file."""
    from agentmux.api.facade import run_chain_file

    result = await run_chain_file(
        args.chain, args.input, settings=settings, generate_summary=not args.no_summary,
    )
    print(result.output)
    return 0 if result.success else 1


async def _cmd_plan(args: argparse.Namespace, settings: Settings) -> int:
    """Plan a chain with the configured planner and execute it."""
    from agentmux.api.facade import run_dynamic

    result = await run_dynamic(args.request, settings=settings)
    print(result.output)
    return 0 if result.success else 1


async def _cmd_validate(args: argparse.Namespace, settings: Settings) -> int:
    """Report structural errors of a chain file without executing it."""
    from agentmux.pipeline.chain_model import ChainDefinition, ChainFormatError

    chain_path: Path = args.chain
    if not chain_path.is_file():
        print(f"Chain file not found: {chain_path}")
        return 1

    try:
        chain = ChainDefinition.from_json(chain_path.read_text(encoding="utf-8"))
    except ChainFormatError as exc:
        print(str(exc))
        return 1

    result = chain.validate_chain()
    if result.valid:
        print(f"OK: {chain.summary()}")
        return 0

    print(f"Invalid: {chain.summary()}")
    for error in result.errors:
        print(f"  - {error}")
    return 1


async def _cmd_agents(args: argparse.Namespace, settings: Settings) -> int:
    """List agents available to chains."""
    from agentmux.api.facade import build_registry

    registry = await build_registry(settings)
    try:
        if not len(registry):
            print("No agents registered.")
            return 0
        print(f"\nRegistered agents ({len(registry)}):")
        for agent in registry.agents:
            description = agent.description or "No description available"
            print(f"  {agent.name:<24} {description}")
        for record in registry.plugins:
            source = record.metadata.bundle_path or "?"
            print(f"  plugin {record.metadata.name} v{record.metadata.version} ({source})")
    finally:
        await registry.unload_all_plugins()
    return 0


async def _cmd_chat(args: argparse.Namespace, settings: Settings) -> int:
    """Read prompts from stdin until an empty line or 'exit'."""
    from agentmux.llm.client_factory import create_llm_client

    client = create_llm_client(settings.llm_provider, settings.llm_model, settings)
    loop = asyncio.get_running_loop()

    while True:
        try:
            line = await loop.run_in_executor(None, input, "You: ")
        except EOFError:
            break
        text = line.strip()
        if not text or text.lower() in _EXIT_COMMANDS:
            break
        response = await client.generate(text)
        print(f"AI: {response}")
    return 0


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
