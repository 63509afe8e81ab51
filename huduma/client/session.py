"""
Client side of a job conversation.

States: detached -> attaching -> attached -> detached.

On every (re)attach the session opens its push connection first and then
seeds itself from history, so nothing sent while it was away is lost.
Pushed messages and the user's own sent messages are merged by id and
kept in creation order.
"""

from __future__ import annotations

import asyncio
import json
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import httpx
import pydantic
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from huduma.common.constants import SUPERSEDED_CLOSE_CODE, TypeMsg
from huduma.common.logger import get_logger, log_error, log_info
from huduma.core.jobs.models import Job
from huduma.core.messages.models import Message
from huduma.client.api_client import ChatApiClient
from huduma.realtime.events import JobUpdatedEvent, NewMessageEvent, parse_push_event

logger = get_logger("client")


class SessionState(str, Enum):
    DETACHED = "detached"
    ATTACHING = "attaching"
    ATTACHED = "attached"


class ChatSession:
    """One user's live view of one job conversation."""

    def __init__(
        self,
        api: ChatApiClient,
        user_id: str,
        job_id: str,
        reconnect_delay: Optional[float] = None,
        on_change: Optional[Callable[["ChatSession"], Awaitable[None]]] = None,
    ) -> None:
        """
        Args:
            api: REST client
            user_id: Who this session belongs to
            job_id: Conversation to follow
            reconnect_delay: Pause before re-attaching (seconds)
            on_change: Awaited whenever messages or the job snapshot change
        """
        if reconnect_delay is None:
            from huduma.config import settings
            reconnect_delay = settings.realtime.CLIENT_RECONNECT_DELAY

        self._api = api
        self.user_id = user_id
        self.job_id = job_id
        self._reconnect_delay = reconnect_delay
        self._on_change = on_change

        self._state = SessionState.DETACHED
        self._messages: dict[str, Message] = {}
        self._job: Optional[Job] = None
        self._ws: Any = None
        self._closing = False

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def job(self) -> Optional[Job]:
        return self._job

    @property
    def messages(self) -> list[Message]:
        """Messages in creation order (stable for equal timestamps)."""
        return sorted(self._messages.values(), key=lambda m: m.created_at)

    @property
    def ws_url(self) -> str:
        return f"{self._api.ws_base_url}/ws?userId={self.user_id}"

    def counterpart(self) -> Optional[str]:
        """The other party of the job, if known."""
        if self._job is None:
            return None
        if self.user_id == self._job.customer_id:
            return self._job.provider_id
        return self._job.customer_id

    # =========================================================================
    # MERGING
    # =========================================================================

    async def seed(self) -> None:
        """Replaces local state with persisted history and the job snapshot."""
        history = await self._api.fetch_history(self.job_id)
        job = await self._api.get_job(self.job_id)

        seeded: dict[str, Message] = {m.id: m for m in history}
        # Keep anything merged meanwhile (e.g. a send that raced the fetch)
        for message_id, message in self._messages.items():
            seeded.setdefault(message_id, message)

        self._messages = seeded
        if job is not None:
            self._job = job
        await self._changed()

    def add_local(self, message: Message) -> bool:
        """
        Merges a message; returns False if it was already known or belongs
        to another job.
        """
        if message.job_id != self.job_id or message.id in self._messages:
            return False
        self._messages[message.id] = message
        return True

    def apply_event(self, event: Any) -> bool:
        """
        Applies a pushed event. Events for other jobs are ignored.

        Returns:
            True if local state changed
        """
        if isinstance(event, NewMessageEvent):
            return self.add_local(event.message)
        if isinstance(event, JobUpdatedEvent) and event.job.id == self.job_id:
            self._job = event.job
            return True
        return False

    async def handle_raw(self, raw: str | bytes) -> bool:
        try:
            event = parse_push_event(raw)
        except pydantic.ValidationError:
            if _is_pong(raw):
                return False
            logger.debug("Ignoring unknown push payload: %s", raw)
            return False

        changed = self.apply_event(event)
        if changed:
            await self._changed()
        return changed

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def send(
        self,
        content: str,
        message_type: str = "text",
        image_url: Optional[str] = None,
    ) -> Message:
        """
        Sends a message to the other party and merges the stored copy.

        Raises:
            RuntimeError: the job snapshot has no counterpart yet
        """
        if self._job is None:
            self._job = await self._api.get_job(self.job_id)
        receiver_id = self.counterpart()
        if receiver_id is None:
            raise RuntimeError(f"Job {self.job_id} has nobody to talk to yet")

        message = await self._api.send_message(
            self.job_id,
            self.user_id,
            receiver_id,
            content,
            message_type=message_type,
            image_url=image_url,
        )
        if self.add_local(message):
            await self._changed()
        return message

    async def mark_read(self) -> int:
        return await self._api.mark_read(self.job_id, self.user_id)

    # =========================================================================
    # CONNECTION LOOP
    # =========================================================================

    async def run(self) -> None:
        """
        Attaches and stays attached until detach(), until the server
        reports that another connection replaced this one, or until the
        API rejects the job (4xx).
        """
        self._closing = False
        while not self._closing:
            self._state = SessionState.ATTACHING
            try:
                async with websockets.connect(self.ws_url) as ws:
                    self._ws = ws
                    await self.seed()
                    self._state = SessionState.ATTACHED
                    await log_info(
                        f"Chat session attached: user={self.user_id} job={self.job_id}",
                        type_msg=TypeMsg.DEBUG,
                    )

                    try:
                        async for raw in ws:
                            await self.handle_raw(raw)
                    except ConnectionClosed:
                        pass

                    if ws.close_code == SUPERSEDED_CLOSE_CODE:
                        await log_info(
                            f"Chat session of user {self.user_id} replaced by a newer connection",
                            type_msg=TypeMsg.WARNING,
                        )
                        self._closing = True
            except httpx.HTTPStatusError as e:
                if e.response.is_client_error:
                    await log_error(f"Chat session for job {self.job_id} stopped: {e}")
                    self._closing = True
                else:
                    await log_info(f"Chat session seed failed: {e}", type_msg=TypeMsg.WARNING)
            except (OSError, WebSocketException, httpx.HTTPError) as e:
                await log_info(f"Chat session connection error: {e}", type_msg=TypeMsg.WARNING)
            finally:
                self._ws = None
                self._state = SessionState.DETACHED

            if not self._closing:
                await asyncio.sleep(self._reconnect_delay)

        self._state = SessionState.DETACHED

    async def detach(self) -> None:
        """Stops the loop and closes the transport. No handshake."""
        self._closing = True
        ws = self._ws
        if ws is not None:
            await ws.close()
        self._state = SessionState.DETACHED

    async def _changed(self) -> None:
        if self._on_change is not None:
            await self._on_change(self)


def _is_pong(raw: str | bytes) -> bool:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return False
    return isinstance(data, dict) and data.get("type") == "pong"
