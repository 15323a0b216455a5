from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

from cryptography.hazmat.primitives.asymmetric import rsa
import jwt
import pytest

from src.platform.exception.exceptions import AuthenticationError
from src.service.cinema.driving_adapter.http_controller.auth.clerk_auth import ClerkAuth


@pytest.fixture(scope='module')
def private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def clerk_auth(private_key) -> ClerkAuth:
    jwks_client = Mock()
    jwks_client.get_signing_key_from_jwt.return_value = Mock(key=private_key.public_key())
    return ClerkAuth(
        jwks_url='https://clerk.test/.well-known/jwks.json',
        authorized_parties=['https://movies.example.com'],
        jwks_client=jwks_client,
    )


def _session_token(private_key, **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        'sub': 'user_2abc',
        'azp': 'https://movies.example.com',
        'iat': now,
        'exp': now + timedelta(minutes=1),
    }
    payload.update(claims)
    return jwt.encode(payload, private_key, algorithm='RS256')


@pytest.mark.unit
class TestClerkAuth:
    @pytest.mark.asyncio
    async def test_valid_session_yields_user_id(self, clerk_auth, private_key):
        assert await clerk_auth.get_user_id(_session_token(private_key)) == 'user_2abc'

    @pytest.mark.asyncio
    async def test_missing_token_is_rejected(self, clerk_auth):
        with pytest.raises(AuthenticationError, match='Not authenticated'):
            await clerk_auth.get_user_id(None)

    @pytest.mark.asyncio
    async def test_expired_token_is_rejected(self, clerk_auth, private_key):
        token = _session_token(
            private_key, exp=datetime.now(timezone.utc) - timedelta(minutes=5)
        )

        with pytest.raises(AuthenticationError, match='Invalid session token'):
            await clerk_auth.get_user_id(token)

    @pytest.mark.asyncio
    async def test_token_signed_by_another_key_is_rejected(self, clerk_auth):
        other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

        with pytest.raises(AuthenticationError):
            await clerk_auth.get_user_id(_session_token(other_key))

    @pytest.mark.asyncio
    async def test_unknown_authorized_party_is_rejected(self, clerk_auth, private_key):
        token = _session_token(private_key, azp='https://evil.example.com')

        with pytest.raises(AuthenticationError, match='Unauthorized party'):
            await clerk_auth.get_user_id(token)
