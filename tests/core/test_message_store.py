# tests/core/test_message_store.py
"""
Tests for MessageStore: participant validation, ordering and read state.
"""

from __future__ import annotations

import pytest

from huduma.common.constants import JobStatus, MessageType, UserType
from huduma.common.errors import NotFoundError, ValidationError
from huduma.core.messages.store import MessageStore


@pytest.fixture
def store(messages_repo, jobs_repo) -> MessageStore:
    return MessageStore(messages_repo, jobs_repo)


class TestAppend:
    """append()"""

    @pytest.mark.asyncio
    async def test_assigns_id_and_timestamp(self, store, job, customer, provider) -> None:
        message = await store.append(job.id, customer.id, provider.id, "Hello, when can you come?")

        assert message.id
        assert message.created_at is not None
        assert message.is_read is False
        assert message.message_type == MessageType.TEXT

    @pytest.mark.asyncio
    async def test_either_party_may_send(self, store, job, customer, provider) -> None:
        await store.append(job.id, customer.id, provider.id, "Hi")
        reply = await store.append(job.id, provider.id, customer.id, "Tomorrow 10am")

        assert reply.sender_id == provider.id
        assert reply.receiver_id == customer.id

    @pytest.mark.asyncio
    async def test_image_with_attachment(self, store, job, customer, provider) -> None:
        message = await store.append(
            job.id, customer.id, provider.id, "Photo of the leak",
            message_type="image", image_url="https://cdn.example.com/leak.jpg",
        )

        assert message.message_type == MessageType.IMAGE
        assert message.image_url == "https://cdn.example.com/leak.jpg"

    @pytest.mark.asyncio
    async def test_unknown_job(self, store, customer, provider) -> None:
        with pytest.raises(NotFoundError):
            await store.append("missing-job", customer.id, provider.id, "Hi")

    @pytest.mark.asyncio
    async def test_sender_equals_receiver(self, store, job, customer) -> None:
        with pytest.raises(ValidationError):
            await store.append(job.id, customer.id, customer.id, "Talking to myself")

    @pytest.mark.asyncio
    async def test_outsider_rejected(self, store, job, customer, users_repo) -> None:
        outsider = users_repo.add(UserType.PROVIDER, first_name="Kamau")

        with pytest.raises(ValidationError):
            await store.append(job.id, customer.id, outsider.id, "Hi")
        with pytest.raises(ValidationError):
            await store.append(job.id, outsider.id, customer.id, "Hi")

    @pytest.mark.asyncio
    async def test_job_without_provider(self, store, jobs_repo, customer, provider) -> None:
        open_job = jobs_repo.add(customer.id, None)

        with pytest.raises(ValidationError):
            await store.append(open_job.id, customer.id, provider.id, "Hi")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    async def test_blank_content(self, store, job, customer, provider, content) -> None:
        with pytest.raises(ValidationError):
            await store.append(job.id, customer.id, provider.id, content)

    @pytest.mark.asyncio
    async def test_unknown_type(self, store, job, customer, provider) -> None:
        with pytest.raises(ValidationError):
            await store.append(job.id, customer.id, provider.id, "Hi", message_type="video")

    @pytest.mark.asyncio
    async def test_rejected_message_is_not_stored(self, store, messages_repo, job, customer) -> None:
        with pytest.raises(ValidationError):
            await store.append(job.id, customer.id, customer.id, "Hi")

        assert messages_repo.rows == []


class TestHistory:
    """history()"""

    @pytest.mark.asyncio
    async def test_empty(self, store, job) -> None:
        assert await store.history(job.id) == []

    @pytest.mark.asyncio
    async def test_unknown_job(self, store) -> None:
        with pytest.raises(NotFoundError):
            await store.history("missing-job")

    @pytest.mark.asyncio
    async def test_creation_order(self, store, job, customer, provider) -> None:
        sent = []
        for i in range(5):
            sender, receiver = (customer, provider) if i % 2 == 0 else (provider, customer)
            sent.append(await store.append(job.id, sender.id, receiver.id, f"message {i}"))

        history = await store.history(job.id)

        assert [m.id for m in history] == [m.id for m in sent]
        timestamps = [m.created_at for m in history]
        assert timestamps == sorted(timestamps)

    @pytest.mark.asyncio
    async def test_clock_going_backwards_keeps_order(
        self, clocked_messages_repo, jobs_repo, job, customer, provider, clock,
    ) -> None:
        store = MessageStore(clocked_messages_repo, jobs_repo)

        first = await store.append(job.id, customer.id, provider.id, "first")
        clock.advance(-30)
        second = await store.append(job.id, provider.id, customer.id, "second")
        third = await store.append(job.id, customer.id, provider.id, "third")

        history = await store.history(job.id)

        assert [m.id for m in history] == [first.id, second.id, third.id]
        assert second.created_at >= first.created_at

    @pytest.mark.asyncio
    async def test_identities_resolved_independently(self, store, job, customer, provider) -> None:
        await store.append(job.id, customer.id, provider.id, "Hi")
        await store.append(job.id, provider.id, customer.id, "Hello")

        first, second = await store.history(job.id)

        assert first.sender.id == customer.id
        assert first.receiver.id == provider.id
        assert first.sender.first_name == "Amina"
        assert first.receiver.first_name == "Otieno"
        assert second.sender.id == provider.id
        assert second.receiver.user_type == UserType.CUSTOMER

    @pytest.mark.asyncio
    async def test_other_jobs_not_included(self, store, jobs_repo, job, customer, provider) -> None:
        other = jobs_repo.add(customer.id, provider.id, JobStatus.ACCEPTED)
        await store.append(job.id, customer.id, provider.id, "about job one")
        await store.append(other.id, customer.id, provider.id, "about job two")

        history = await store.history(job.id)

        assert [m.content for m in history] == ["about job one"]


class TestMarkRead:
    """mark_read()"""

    @pytest.mark.asyncio
    async def test_flips_only_messages_addressed_to_user(self, store, job, customer, provider) -> None:
        await store.append(job.id, customer.id, provider.id, "one")
        await store.append(job.id, customer.id, provider.id, "two")
        await store.append(job.id, provider.id, customer.id, "reply")

        updated = await store.mark_read(job.id, provider.id)

        assert updated == 2
        history = await store.history(job.id)
        read_state = {m.content: m.is_read for m in history}
        assert read_state == {"one": True, "two": True, "reply": False}

    @pytest.mark.asyncio
    async def test_idempotent(self, store, job, customer, provider) -> None:
        await store.append(job.id, customer.id, provider.id, "one")

        assert await store.mark_read(job.id, provider.id) == 1
        assert await store.mark_read(job.id, provider.id) == 0

    @pytest.mark.asyncio
    async def test_nothing_unread(self, store, job, customer) -> None:
        assert await store.mark_read(job.id, customer.id) == 0

    @pytest.mark.asyncio
    async def test_unknown_job(self, store, customer) -> None:
        with pytest.raises(NotFoundError):
            await store.mark_read("missing-job", customer.id)

    @pytest.mark.asyncio
    async def test_non_participant(self, store, job, users_repo) -> None:
        outsider = users_repo.add(UserType.CUSTOMER)

        with pytest.raises(ValidationError):
            await store.mark_read(job.id, outsider.id)
