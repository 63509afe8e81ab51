# tests/core/test_message_repository.py
"""
Tests for MessageRepository SQL and row mapping.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from huduma.common.constants import MessageType, UserType
from huduma.core.messages.repository import MessageRepository

NOW = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def _message_row(**overrides):
    row = {
        "id": "msg-1",
        "job_id": "job-1",
        "sender_id": "cust-1",
        "receiver_id": "prov-1",
        "content": "Hello",
        "message_type": "text",
        "image_url": None,
        "is_read": False,
        "created_at": NOW,
    }
    row.update(overrides)
    return row


def _history_row(**overrides):
    row = _message_row(
        sender_first_name="Amina",
        sender_last_name="Wanjiku",
        sender_profile_image_url=None,
        sender_user_type="customer",
        receiver_first_name="Otieno",
        receiver_last_name="Ochieng",
        receiver_profile_image_url="https://cdn.example.com/otieno.jpg",
        receiver_user_type="provider",
    )
    row.update(overrides)
    return row


class TestInsert:

    @pytest.mark.asyncio
    async def test_timestamp_clamped_to_latest_in_job(self, mock_db) -> None:
        mock_db.fetchrow.return_value = _message_row()
        repo = MessageRepository(mock_db)

        message = await repo.insert("job-1", "cust-1", "prov-1", "Hello")

        query = mock_db.fetchrow.call_args.args[0]
        assert "GREATEST" in query
        assert "MAX(created_at)" in query
        assert "clock_timestamp()" in query
        assert message.id == "msg-1"
        assert message.created_at == NOW

    @pytest.mark.asyncio
    async def test_passes_enum_value_and_fresh_id(self, mock_db) -> None:
        mock_db.fetchrow.return_value = _message_row(message_type="image", image_url="https://x/y.png")
        repo = MessageRepository(mock_db)

        message = await repo.insert(
            "job-1", "cust-1", "prov-1", "See photo",
            message_type=MessageType.IMAGE, image_url="https://x/y.png",
        )

        args = mock_db.fetchrow.call_args.args
        assert args[1]  # generated uuid
        assert args[2:] == ("job-1", "cust-1", "prov-1", "See photo", "image", "https://x/y.png")
        assert message.message_type == MessageType.IMAGE


class TestListForJob:

    @pytest.mark.asyncio
    async def test_two_aliased_joins_and_ordering(self, mock_db) -> None:
        repo = MessageRepository(mock_db)

        await repo.list_for_job("job-1")

        query = mock_db.fetch.call_args.args[0]
        assert "JOIN users s ON s.id = m.sender_id" in query
        assert "JOIN users r ON r.id = m.receiver_id" in query
        assert "ORDER BY m.created_at ASC, m.seq ASC" in query

    @pytest.mark.asyncio
    async def test_maps_both_parties(self, mock_db) -> None:
        mock_db.fetch.return_value = [_history_row()]
        repo = MessageRepository(mock_db)

        (message,) = await repo.list_for_job("job-1")

        assert message.sender.id == "cust-1"
        assert message.sender.first_name == "Amina"
        assert message.sender.user_type == UserType.CUSTOMER
        assert message.receiver.id == "prov-1"
        assert message.receiver.first_name == "Otieno"
        assert message.receiver.profile_image_url == "https://cdn.example.com/otieno.jpg"


class TestMarkRead:

    @pytest.mark.asyncio
    async def test_returns_affected_rows(self, mock_db) -> None:
        mock_db.execute.return_value = "UPDATE 3"
        repo = MessageRepository(mock_db)

        assert await repo.mark_read("job-1", "prov-1") == 3

        query = mock_db.execute.call_args.args[0]
        assert "is_read = FALSE" in query

    @pytest.mark.asyncio
    async def test_nothing_to_update(self, mock_db) -> None:
        mock_db.execute.return_value = "UPDATE 0"
        repo = MessageRepository(mock_db)

        assert await repo.mark_read("job-1", "prov-1") == 0
