#!/usr/bin/env python3
"""
Thansin Chat CLI

Terminal front-end for the companion session.

Commands:

1) chat
   - Interactive conversation. Type a message and press Enter to send;
     `/clear` resets the history, `/avatar` shows the current portrait
     reference, `/quit` (or Ctrl-D) leaves.

2) history
   - Print the persisted history.

3) clear
   - Erase the persisted history (the next start shows the greeting).

4) serve
   - Start the HTTP runtime, equivalent to:

       uvicorn runtime.api.server:app
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Iterable

# Ensure project root is on sys.path when running as a script
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from configs.settings import settings
from runtime.api.factory import ChatRuntime, build_runtime
from runtime.models.session_models import Speaker, Turn
from runtime.store.log_store import ConsoleLogStore


QUIT_COMMANDS = {"/quit", "/exit"}


def format_turn(turn: Turn) -> str:
    """Render one turn as a single terminal line."""
    if turn.speaker == Speaker.USER:
        label = "မောင်"
    else:
        label = "သံစဉ်"
    if turn.is_error:
        label += f" [!{turn.error_kind.value}]"
    stamp = turn.created_at.astimezone().strftime("%H:%M")
    return f"[{stamp}] {label}: {turn.text}"


def print_turns(turns: Iterable[Turn]) -> None:
    for turn in turns:
        print(format_turn(turn))


# ---------------------------------------------------------------------------
# chat
# ---------------------------------------------------------------------------


async def run_chat(runtime: ChatRuntime) -> None:
    state = runtime.state
    dispatcher = runtime.dispatcher

    if runtime.handle is not None and not runtime.handle.is_configured:
        print("[Thansin] ⚠ OPENAI_API_KEY is not set; replies will fail until it is.")

    print_turns(state.history)

    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            print()
            break

        command = line.strip()
        if not command:
            continue
        if command in QUIT_COMMANDS:
            break
        if command == "/clear":
            state.clear()
            print_turns(state.history)
            continue
        if command == "/avatar":
            avatar = state.avatar
            status = " (regenerating)" if avatar.regenerating else ""
            print(f"[Thansin] avatar: {avatar.reference or '-'} mood={avatar.mood or '-'}{status}")
            continue

        print("[Thansin] ...")
        reply = await dispatcher.send(command)
        if reply is not None:
            print(format_turn(reply))

    await dispatcher.wait_for_avatar()


def cmd_chat() -> None:
    runtime = build_runtime(settings, log_store=ConsoleLogStore())
    asyncio.run(run_chat(runtime))


# ---------------------------------------------------------------------------
# history / clear
# ---------------------------------------------------------------------------


def cmd_history() -> None:
    runtime = build_runtime(settings)
    print_turns(runtime.state.history)


def cmd_clear() -> None:
    runtime = build_runtime(settings)
    runtime.state.clear()
    print(f"[Thansin] ✓ History cleared ({runtime.state.storage_key})")


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


def cmd_serve(host: str, port: int, reload: bool) -> None:
    # Lazy import so the terminal commands do not need uvicorn loaded.
    import uvicorn

    print(f"[Thansin] Serving on http://{host}:{port}/chat")
    uvicorn.run("runtime.api.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Thansin Chat CLI")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: THANSIN_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("chat", help="Chat with Thansin in the terminal")
    subparsers.add_parser("history", help="Print the persisted history")
    subparsers.add_parser("clear", help="Erase the persisted history")

    p_serve = subparsers.add_parser("serve", help="Run the HTTP runtime")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    command: str = args.command

    if command == "chat":
        cmd_chat()
    elif command == "history":
        cmd_history()
    elif command == "clear":
        cmd_clear()
    elif command == "serve":
        cmd_serve(host=args.host, port=args.port, reload=args.reload)
    else:
        parser.error(f"Unknown command: {command}")


if __name__ == "__main__":
    main()
