from abc import ABC, abstractmethod
from typing import Any, Dict


class IIdentityProvider(ABC):
    """Identity provider holding per-user metadata (Clerk)"""

    @abstractmethod
    async def get_private_metadata(self, *, user_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def update_private_metadata(self, *, user_id: str, metadata: Dict[str, Any]) -> None:
        pass
