# tests/core/test_identity.py
"""
Тесты для резолвера идентичности.
"""

from __future__ import annotations

import httpx
import pytest

from src.common.exceptions import Unauthorized
from src.core.identity import IdentityResolver


def _resolver(handler) -> IdentityResolver:
    client = httpx.AsyncClient(base_url="http://auth.test/auth/v1", transport=httpx.MockTransport(handler))
    return IdentityResolver(base_url="http://auth.test/auth/v1", api_key="anon", timeout=1.0, client=client)


class TestResolve:
    """Тесты для IdentityResolver.resolve."""

    @pytest.mark.asyncio
    async def test_returns_user_id(self) -> None:
        seen: dict[str, httpx.Request] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["request"] = request
            return httpx.Response(200, json={"id": "user-1", "email": "driver@example.com"})

        resolver = _resolver(handler)

        assert await resolver.resolve("Bearer token") == "user-1"
        request = seen["request"]
        assert request.url.path == "/auth/v1/user"
        assert request.headers["authorization"] == "Bearer token"
        assert request.headers["apikey"] == "anon"
        await resolver.close()

    @pytest.mark.parametrize("header", [None, "", "   "])
    @pytest.mark.asyncio
    async def test_missing_header(self, header) -> None:
        """Без заголовка провайдер не вызывается."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("провайдер не должен вызываться")

        with pytest.raises(Unauthorized):
            await _resolver(handler).resolve(header)

    @pytest.mark.asyncio
    async def test_rejected_token(self) -> None:
        resolver = _resolver(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}))

        with pytest.raises(Unauthorized) as exc_info:
            await resolver.resolve("Bearer expired")

        assert exc_info.value.details == {"status": 401}

    @pytest.mark.asyncio
    async def test_provider_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(Unauthorized):
            await _resolver(handler).resolve("Bearer token")

    @pytest.mark.asyncio
    async def test_invalid_payload(self) -> None:
        resolver = _resolver(lambda request: httpx.Response(200, text="not json"))

        with pytest.raises(Unauthorized):
            await resolver.resolve("Bearer token")

    @pytest.mark.asyncio
    async def test_payload_without_id(self) -> None:
        resolver = _resolver(lambda request: httpx.Response(200, json={"email": "x@example.com"}))

        with pytest.raises(Unauthorized):
            await resolver.resolve("Bearer token")
