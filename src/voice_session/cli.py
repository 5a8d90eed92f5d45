"""Interactive CLI for the voice session client.

Drives the session controller and action gateway against the mock session
client, printing the current view whenever it changes.
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any

from voice_session.client.mock import MockSessionClient
from voice_session.config import ClientConfig
from voice_session.controller import ApplicationState, SessionController, SessionOptions
from voice_session.gateway import ActionGateway
from voice_session.snapshot import SessionSnapshot
from voice_session.utils.logging import setup_logging

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  /start  - Join the session
  /leave  - Leave the session
  /mute   - Toggle start muted
  /reset  - Clear an error and start over
  /status - Show the current view
  /quit   - Exit client
  /help   - Show this help"""


def render(snapshot: SessionSnapshot) -> str:
    """Render a snapshot as a single status line.

    Args:
        snapshot: Controller snapshot

    Returns:
        Text for the current view; an error pre-empts everything else
    """
    if snapshot.error is not None:
        return f"[error] An error occurred: {snapshot.error.message}"

    muted = "on" if snapshot.start_muted else "off"

    if snapshot.view == "session":
        return f"[session] {snapshot.transport_state} (start muted: {muted}) - /leave to end"

    label = snapshot.status_text or snapshot.transport_state
    action = "/start" if snapshot.start_enabled else "please wait"
    return f"[configure] {label} (start muted: {muted}) - {action}"


class SessionCLI:
    """Terminal front-end over the controller and gateway."""

    def __init__(self, config: ClientConfig) -> None:
        """Initialize CLI and mount the controller.

        Args:
            config: Client configuration
        """
        self.config = config
        self.running = True
        self.client = MockSessionClient(config.mock)
        self.controller = SessionController(
            self.client,
            SessionOptions(start_muted=config.session.start_muted),
        )
        self.gateway = ActionGateway(self.client, self.controller)
        self._last_line: str | None = None
        self._tasks: set[asyncio.Task[object]] = set()

        self.controller.add_listener(self._on_snapshot)

    def _on_snapshot(self, snapshot: SessionSnapshot) -> None:
        line = render(snapshot)
        if line != self._last_line:
            self._last_line = line
            print(line)

    def _spawn(self, coro: Coroutine[Any, Any, object]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def handle_command(self, text: str) -> None:
        """Execute a single user command.

        Args:
            text: Raw input line
        """
        command = text.strip().lower().lstrip("/")

        if command == "quit":
            self.running = False
        elif command == "help":
            print(HELP_TEXT)
        elif command == "status":
            print(render(self.controller.snapshot()))
        elif command == "start":
            if not self.controller.start_enabled:
                print("Start is not available yet")
                return
            # Connect may take a while; keep reading input meanwhile
            self._spawn(self.gateway.start())
        elif command == "leave":
            await self.gateway.leave()
        elif command == "mute":
            self.controller.toggle_start_muted()
        elif command == "reset":
            self.controller.reset()
        elif command:
            print(f"Unknown command: {command}")
            print("Type /help for available commands")

    async def input_loop(self) -> None:
        """Read commands from stdin until quit or EOF."""
        loop = asyncio.get_running_loop()

        while self.running:
            try:
                text = await loop.run_in_executor(None, input, "> ")
            except EOFError:
                self.running = False
                break

            await self.handle_command(text)

    async def run(self) -> None:
        """Run the CLI until the user quits."""
        print(HELP_TEXT)
        self._on_snapshot(self.controller.snapshot())
        try:
            await self.input_loop()
        finally:
            for task in list(self._tasks):
                task.cancel()
            if self.controller.app_state in (
                ApplicationState.CONNECTING,
                ApplicationState.CONNECTED,
            ):
                await self.gateway.leave()
            self.controller.close()


async def run_cli(config: ClientConfig) -> None:
    """Run the CLI with the given configuration.

    The mock client may schedule device init on the loop, so the CLI is
    built inside it.

    Args:
        config: Client configuration
    """
    cli = SessionCLI(config)
    await cli.run()


def main() -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Interactive real-time voice session client")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--start-muted",
        action="store_true",
        help="Keep the microphone off once the bot is ready",
    )
    parser.add_argument(
        "--fail-with",
        choices=["auth", "timeout", "other"],
        default=None,
        help="Make the mock backend fail the connect attempt",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    try:
        if args.config is not None:
            config = ClientConfig.from_yaml(args.config)
        else:
            config = ClientConfig.from_yaml_with_defaults()
    except (FileNotFoundError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    if args.start_muted:
        config.session.start_muted = True
    if args.fail_with:
        config.mock.fail_with = args.fail_with

    setup_logging("DEBUG" if args.verbose else config.log_level, json_format=config.log_json)

    try:
        asyncio.run(run_cli(config))
    except KeyboardInterrupt:
        print("\nExiting...")
        sys.exit(0)


if __name__ == "__main__":
    main()
