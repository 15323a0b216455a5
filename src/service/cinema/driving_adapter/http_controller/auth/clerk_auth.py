"""
Clerk session verification

Clerk session tokens are RS256 JWTs signed with the instance's JWKS keys; the
caller's user id is the `sub` claim.
"""

from typing import Dict, List, Optional

import anyio
import jwt

from src.platform.exception.exceptions import AuthenticationError


class ClerkAuth:
    def __init__(
        self,
        *,
        jwks_url: str,
        authorized_parties: Optional[List[str]] = None,
        leeway_seconds: int = 5,
        jwks_client: Optional[jwt.PyJWKClient] = None,
    ) -> None:
        self.authorized_parties = authorized_parties or []
        self.leeway_seconds = leeway_seconds
        self._jwks_client = jwks_client or jwt.PyJWKClient(jwks_url, cache_keys=True)

    async def decode_session_token(self, token: str) -> Dict:
        try:
            # Key lookup may hit the network on cache miss
            signing_key = await anyio.to_thread.run_sync(
                self._jwks_client.get_signing_key_from_jwt, token
            )
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=['RS256'],
                leeway=self.leeway_seconds,
                options={'require': ['sub', 'exp']},
            )
        except jwt.PyJWTError as e:
            raise AuthenticationError(f'Invalid session token: {e}') from e

        azp = payload.get('azp')
        if self.authorized_parties and azp and azp not in self.authorized_parties:
            raise AuthenticationError(f'Unauthorized party: {azp}')
        return payload

    async def get_user_id(self, token: Optional[str]) -> str:
        if not token:
            raise AuthenticationError('Not authenticated')
        payload = await self.decode_session_token(token)
        return payload['sub']
