"""
Main entry point for the agent dispatch application.

This module initializes configuration and logging, builds the selected
agent preset, and either serves the HTTP API or runs an interactive chat
session in the terminal.
"""

import argparse
import asyncio
import json
import sys
import traceback

import uvicorn

from agent_dispatch.api.app import create_app
from agent_dispatch.config import DispatchConfig, initialize_config
from agent_dispatch.orchestration.orchestrator import Orchestrator
from agent_dispatch.orchestration.presets import PRESETS, build_orchestrator
from agent_dispatch.services.session_service import SessionService
from agent_dispatch.utils.error_handling import DispatchError
from agent_dispatch.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_COMMANDS = ("exit", "quit", "q", "bye")


def setup_argparse() -> argparse.ArgumentParser:
    """
    Set up the argument parser for the CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description="Multi-agent dispatch system powered by Google Gemini"
    )

    parser.add_argument(
        "--mode",
        type=str,
        choices=["serve", "chat"],
        default="serve",
        help="Mode: 'serve' for the HTTP API, 'chat' for an interactive session",
    )
    parser.add_argument(
        "--preset",
        type=str,
        choices=list(PRESETS),
        default="travel",
        help="Agent team to run",
    )
    parser.add_argument(
        "--router",
        type=str,
        choices=["keyword", "model"],
        default="keyword",
        help="Routing strategy: keyword matching or model classification",
    )

    server_group = parser.add_argument_group("Server")
    server_group.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    server_group.add_argument("--port", type=int, default=8000, help="Bind port")

    system_group = parser.add_argument_group("System Configuration")
    system_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set the logging level",
    )
    system_group.add_argument(
        "--log-file",
        type=str,
        help="Path to write log file (optional)",
    )
    system_group.add_argument(
        "--config",
        type=str,
        help="Path to custom configuration (.env) file",
    )

    return parser


def display_help() -> None:
    """Display available commands for chat mode."""
    print("\nAvailable commands:")
    print("  help                - Display this help message")
    print("  plan                - Show the current plan")
    print("  itinerary           - Show or build the itinerary")
    print("  exit, quit, q, bye  - Exit the application")


async def run_chat_mode(orchestrator: Orchestrator, preset: str) -> None:
    """
    Run an interactive session against the orchestrator.

    Args:
        orchestrator: Orchestrator for the selected preset
        preset: Preset name, shown in the banner
    """
    service = SessionService(orchestrator)
    created = await service.create_session("cli")
    session_id = created["sessionId"]
    logger.info(f"Starting interactive {preset} session {session_id}")

    print(f"\n=== Agent Dispatch ({preset}) ===")
    print("Type 'help' for available commands, 'exit' to quit.\n")

    plan: dict = {}
    while True:
        user_input = input("\nYou: ").strip()
        if not user_input:
            continue

        command = user_input.lower()
        if command in EXIT_COMMANDS:
            await service.end_session(session_id)
            print("\nGoodbye!")
            break
        if command == "help":
            display_help()
            continue
        if command == "plan":
            print(json.dumps(plan, indent=2))
            continue

        try:
            if command == "itinerary":
                result = await service.itinerary(session_id)
                print(json.dumps(result["itinerary"], indent=2))
                continue

            result = await service.query(session_id, user_input)
            plan = result["plan"]
            print(f"\nAssistant: {result['response']}")

        except DispatchError as e:
            logger.warning(f"Request failed in chat session: {e!s}")
            print(f"\nAssistant: {e!s}")


def run_server(orchestrator: Orchestrator, host: str, port: int) -> None:
    app = create_app(SessionService(orchestrator))
    logger.info(f"Serving agent dispatch API on http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_config=None)


def _initialize(args: argparse.Namespace) -> DispatchConfig | None:
    """Load configuration and configure logging; None when the API key is missing."""
    setup_logging(log_level=args.log_level or "INFO", log_file=args.log_file)

    system_config = initialize_config(
        custom_config_path=args.config, validate=True, raise_on_error=False
    )
    setup_logging(
        log_level=args.log_level or system_config.system.log_level,
        log_file=args.log_file,
    )

    if not system_config.api.validate():
        print("\nError: GEMINI_API_KEY is not set.")
        print("Add it to your environment or a .env file and try again.")
        return None
    return system_config


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point function.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = setup_argparse().parse_args(argv)

    try:
        system_config = _initialize(args)
        if system_config is None:
            return 1

        orchestrator = build_orchestrator(
            args.preset, config=system_config, router=args.router
        )
        if args.mode == "chat":
            asyncio.run(run_chat_mode(orchestrator, args.preset))
        else:
            run_server(orchestrator, args.host, args.port)
        return 0

    except DispatchConfig.ConfigurationError as e:
        logger.error(f"Configuration error: {e!s}")
        print(f"\nConfiguration error: {e!s}")
        return 1
    except FileNotFoundError as e:
        logger.error(f"File not found: {e!s}")
        print(f"\nError: {e!s}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted. Goodbye!")
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e!s}\n{traceback.format_exc()}")
        print(f"\nAn unexpected error occurred: {e!s}")
        return 1


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
