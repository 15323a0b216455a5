import httpx
import orjson
import pytest

from src.platform.exception.exceptions import IdentityProviderError, NotFoundError
from src.service.cinema.driven_adapter.identity.clerk_identity_provider import (
    ClerkIdentityProvider,
)


def _make_provider(handler) -> ClerkIdentityProvider:
    return ClerkIdentityProvider(
        api_url='https://api.clerk.test/v1/',
        secret_key='sk_test_123',
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
class TestClerkIdentityProvider:
    @pytest.mark.asyncio
    async def test_reads_private_metadata(self):
        # Arrange
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={'id': 'user_1', 'private_metadata': {'favorites': ['550']}}
            )

        provider = _make_provider(handler)

        # Act
        metadata = await provider.get_private_metadata(user_id='user_1')

        # Assert
        assert metadata == {'favorites': ['550']}
        assert seen[0].method == 'GET'
        assert seen[0].url.path == '/v1/users/user_1'
        assert seen[0].headers['Authorization'] == 'Bearer sk_test_123'

    @pytest.mark.asyncio
    async def test_user_without_metadata_reads_as_empty(self):
        provider = _make_provider(lambda request: httpx.Response(200, json={'id': 'user_1'}))

        assert await provider.get_private_metadata(user_id='user_1') == {}

    @pytest.mark.asyncio
    async def test_update_sends_full_private_metadata(self):
        # Arrange
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={'id': 'user_1'})

        provider = _make_provider(handler)

        # Act
        await provider.update_private_metadata(
            user_id='user_1', metadata={'favorites': ['13', '680']}
        )

        # Assert
        assert seen[0].method == 'PATCH'
        assert seen[0].url.path == '/v1/users/user_1/metadata'
        assert orjson.loads(seen[0].content) == {'private_metadata': {'favorites': ['13', '680']}}

    @pytest.mark.asyncio
    async def test_unknown_user_raises_not_found(self):
        provider = _make_provider(lambda request: httpx.Response(404, json={'errors': []}))

        with pytest.raises(NotFoundError):
            await provider.get_private_metadata(user_id='user_missing')

    @pytest.mark.asyncio
    async def test_server_error_raises_identity_provider_error(self):
        provider = _make_provider(lambda request: httpx.Response(503, text='maintenance'))

        with pytest.raises(IdentityProviderError, match='503'):
            await provider.get_private_metadata(user_id='user_1')

    @pytest.mark.asyncio
    async def test_network_failure_raises_identity_provider_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError('connection refused', request=request)

        provider = _make_provider(handler)

        with pytest.raises(IdentityProviderError, match='connection refused'):
            await provider.update_private_metadata(user_id='user_1', metadata={})
