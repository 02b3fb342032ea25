# src/core/identity/service.py
"""
Клиент провайдера идентификации.
Проверяет bearer-токен и возвращает ID пользователя.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.common.exceptions import Unauthorized
from src.common.logger import log_warning


class IdentityResolver:
    """
    Резолвер идентичности.
    Делает GET {AUTH_URL}/user с заголовком Authorization вызывающего.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if base_url is None or api_key is None or timeout is None:
            from src.config import settings
            base_url = base_url or settings.auth.AUTH_URL
            api_key = api_key if api_key is not None else settings.auth.AUTH_API_KEY
            timeout = timeout or settings.auth.AUTH_TIMEOUT

        self._api_key = api_key
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)

    async def close(self) -> None:
        """Закрывает HTTP клиент."""
        await self._client.aclose()

    async def resolve(self, authorization: str | None) -> str:
        """
        Возвращает ID аутентифицированного пользователя.

        Args:
            authorization: Значение заголовка Authorization

        Raises:
            Unauthorized: Заголовок отсутствует или токен отклонён
        """
        if not authorization or not authorization.strip():
            raise Unauthorized("Missing authorization header")

        headers = {"Authorization": authorization}
        if self._api_key:
            headers["apikey"] = self._api_key

        try:
            response = await self._client.get("/user", headers=headers)
            response.raise_for_status()
            payload: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as e:
            raise Unauthorized(status=e.response.status_code) from e
        except (httpx.HTTPError, ValueError) as e:
            await log_warning(f"Провайдер идентификации недоступен: {e}")
            raise Unauthorized() from e

        user_id = payload.get("id")
        if not user_id:
            raise Unauthorized()

        return str(user_id)
