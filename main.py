#!/usr/bin/env python3
"""
Huduma entrypoint.

Usage:
    python main.py [api]                  # HTTP + WebSocket API (default)
    python main.py chat <userId> <jobId>  # Terminal chat client for one job
"""

from __future__ import annotations

import asyncio
import sys

from huduma.common.constants import TypeMsg
from huduma.common.logger import log_error, log_info, setup_logging
from huduma.config import settings


async def run_api() -> None:
    """Runs the API under uvicorn."""
    import uvicorn

    await log_info(
        f"Starting Huduma API v{settings.system.VERSION} on port {settings.deployment.API_PORT}...",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "huduma.api.app:app",
        host=settings.deployment.API_HOST,
        port=settings.deployment.API_PORT,
        workers=settings.deployment.API_WORKERS,
        reload=settings.system.DEBUG,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info("Huduma API: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


async def run_chat(user_id: str, job_id: str) -> None:
    """
    Follows one job conversation in the terminal.
    Every input line is sent as a message; an empty line quits.
    """
    from huduma.client import ChatApiClient, ChatSession

    printed: set[str] = set()

    async def show(session: ChatSession) -> None:
        for message in session.messages:
            if message.id in printed:
                continue
            printed.add(message.id)
            who = "me" if message.sender_id == user_id else message.sender_id
            print(f"[{message.created_at:%H:%M:%S}] {who}: {message.content}")

    async with ChatApiClient() as api:
        session = ChatSession(api, user_id, job_id, on_change=show)
        loop_task = asyncio.create_task(session.run())
        try:
            while True:
                line = await asyncio.to_thread(input)
                if not line.strip():
                    break
                await session.send(line)
        finally:
            await session.detach()
            loop_task.cancel()
            await asyncio.gather(loop_task, return_exceptions=True)


def print_usage() -> None:
    print(__doc__)


async def main(argv: list[str]) -> None:
    setup_logging()

    mode = argv[0].lower() if argv else "api"

    try:
        if mode == "api":
            await run_api()
        elif mode == "chat" and len(argv) == 3:
            await run_chat(argv[1], argv[2])
        else:
            print_usage()
    except KeyboardInterrupt:
        await log_info("Stopped (Ctrl+C)", type_msg=TypeMsg.INFO)
    except Exception as e:
        await log_error(f"Fatal error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] in ("--help", "-h"):
        print_usage()
        sys.exit(0)

    try:
        asyncio.run(main(sys.argv[1:]))
    except KeyboardInterrupt:
        pass
