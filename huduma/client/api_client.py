import httpx
from typing import Optional, List, Dict, Any

from huduma.config import settings
from huduma.core.jobs.models import Job
from huduma.core.messages.models import Message, MessageWithParties


class BaseClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def _post(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.client.post(path, json=json)
        response.raise_for_status()
        return response.json()

    async def _patch(self, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.client.patch(path, json=json)
        response.raise_for_status()
        return response.json()


class ChatApiClient(BaseClient):
    """Job and message endpoints used by a chat session."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url or settings.deployment.API_PUBLIC_URL, timeout, transport)

    @property
    def ws_base_url(self) -> str:
        """Same host, ws:// or wss:// scheme."""
        url = str(self.client.base_url).rstrip("/")
        if url.startswith("https://"):
            return "wss://" + url[len("https://"):]
        if url.startswith("http://"):
            return "ws://" + url[len("http://"):]
        return url

    async def send_message(
        self,
        job_id: str,
        sender_id: str,
        receiver_id: str,
        content: str,
        message_type: str = "text",
        image_url: Optional[str] = None,
    ) -> Message:
        data = await self._post("/api/messages", json={
            "jobId": job_id,
            "senderId": sender_id,
            "receiverId": receiver_id,
            "content": content,
            "messageType": message_type,
            "imageUrl": image_url,
        })
        return Message.model_validate(data)

    async def fetch_history(self, job_id: str) -> List[MessageWithParties]:
        data = await self._get(f"/api/messages/{job_id}")
        return [MessageWithParties.model_validate(item) for item in data]

    async def mark_read(self, job_id: str, user_id: str) -> int:
        data = await self._patch(f"/api/messages/{job_id}/read", json={"userId": user_id})
        return data["updated"]

    async def get_job(self, job_id: str) -> Optional[Job]:
        try:
            data = await self._get(f"/api/jobs/detail/{job_id}")
            return Job.model_validate(data)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

    async def update_job(self, job_id: str, changes: Dict[str, Any]) -> Job:
        data = await self._patch(f"/api/jobs/{job_id}", json=changes)
        return Job.model_validate(data)
