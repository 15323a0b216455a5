from typing import Any, Dict, Optional

import attrs


@attrs.define
class UserEntity:
    id: str
    email: str
    name: str
    image: Optional[str] = None

    @classmethod
    def from_clerk_payload(cls, payload: Dict[str, Any]) -> 'UserEntity':
        """
        Project a Clerk user payload onto a user record.

        Missing keys or an empty `email_addresses` list raise KeyError/IndexError;
        Clerk always sends at least one address, so the payload is not validated.
        """
        first_name = payload.get('first_name') or ''
        last_name = payload.get('last_name') or ''
        return cls(
            id=payload['id'],
            email=payload['email_addresses'][0]['email_address'],
            name=f'{first_name} {last_name}'.strip(),
            image=payload.get('image_url'),
        )
