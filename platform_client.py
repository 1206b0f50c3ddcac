"""HTTP client for the hosting platform.

Looks up users and posts by id and sends private messages. Every call is
best effort: network errors, timeouts, non-2xx responses and bodies that do
not match the expected shape are logged and reported as None/False, never raised.
"""

from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import settings
from logger_config import setup_logger
from schemas import Actor, PrivateMessage, Target

logger = setup_logger(__name__, 'platform.log')

ModelT = TypeVar("ModelT", bound=BaseModel)


class PlatformClient:
    """Lookup service and private-message channel."""

    def __init__(
        self,
        base_url: str = settings.PLATFORM_API_URL,
        token: Optional[str] = settings.PLATFORM_API_TOKEN,
        timeout: float = settings.PLATFORM_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self.transport
        )

    async def _get_json(self, path: str) -> Optional[dict]:
        try:
            async with self._client() as client:
                response = await client.get(path)

            if response.status_code == 404:
                return None
            if response.status_code != 200:
                logger.error(f"GET {path} failed. Status: {response.status_code}, Response: {response.text}")
                return None
            return response.json()

        except httpx.TimeoutException:
            logger.error(f"Timeout while fetching {path}")
            return None
        except httpx.RequestError as e:
            logger.error(f"Network error while fetching {path}: {str(e)}")
            return None
        except ValueError as e:
            logger.error(f"Invalid JSON from {path}: {str(e)}")
            return None

    async def _get_model(self, path: str, model: Type[ModelT]) -> Optional[ModelT]:
        data = await self._get_json(path)
        if not data:
            return None
        try:
            return model(**data)
        except (ValidationError, TypeError) as e:
            logger.error(f"Unexpected {model.__name__} body from {path}: {str(e)}")
            return None

    async def get_user_by_id(self, user_id: str) -> Optional[Actor]:
        return await self._get_model(f"/api/users/{user_id}", Actor)

    async def get_post_by_id(self, post_id: str) -> Optional[Target]:
        return await self._get_model(f"/api/posts/{post_id}", Target)

    async def send_private_message(self, message: PrivateMessage) -> bool:
        """Send a private message.

        Returns:
            bool: True if the platform accepted the message
        """
        try:
            async with self._client() as client:
                response = await client.post("/api/messages", json=message.model_dump())

            if response.status_code in (200, 201, 202):
                logger.info(f"Private message sent to {message.to}: {message.subject}")
                return True

            logger.error(
                f"Failed to send private message to {message.to}. "
                f"Status: {response.status_code}, Response: {response.text}"
            )
            return False

        except httpx.TimeoutException:
            logger.error(f"Timeout while sending private message to {message.to}")
            return False
        except httpx.RequestError as e:
            logger.error(f"Network error while sending private message to {message.to}: {str(e)}")
            return False
