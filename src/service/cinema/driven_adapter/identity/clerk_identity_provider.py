from typing import Any, Dict, Optional

import httpx

from src.platform.exception.exceptions import IdentityProviderError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_identity_provider import IIdentityProvider


class ClerkIdentityProvider(IIdentityProvider):
    """
    Clerk Backend API client for per-user private metadata.

    GET   /users/{id}           -> {..., private_metadata: {...}}
    PATCH /users/{id}/metadata  <- {private_metadata: {...}}

    Clerk deep-merges PATCHed metadata, so a removed key must be sent as null;
    favourites are always sent as a full list, which replaces the old one.
    """

    def __init__(
        self,
        *,
        api_url: str,
        secret_key: str,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_url = api_url.rstrip('/')
        self._headers = {'Authorization': f'Bearer {secret_key}'}
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            headers=self._headers,
            timeout=self.timeout_seconds,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        async with self._client() as client:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.HTTPError as e:
                raise IdentityProviderError(f'Clerk request failed: {e}') from e

        if response.status_code == 404:
            raise NotFoundError(f'Clerk user not found: {path}')
        if response.is_error:
            raise IdentityProviderError(
                f'Clerk responded {response.status_code} on {method} {path}: {response.text}'
            )
        return response.json()

    @Logger.io
    async def get_private_metadata(self, *, user_id: str) -> Dict[str, Any]:
        user = await self._request('GET', f'/users/{user_id}')
        return dict(user.get('private_metadata') or {})

    @Logger.io
    async def update_private_metadata(self, *, user_id: str, metadata: Dict[str, Any]) -> None:
        await self._request(
            'PATCH', f'/users/{user_id}/metadata', json={'private_metadata': metadata}
        )
