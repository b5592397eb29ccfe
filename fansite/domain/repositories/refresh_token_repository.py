"""
Refresh Token Repository Interface.
The allow-list of refresh tokens that may still be rotated.
"""

from datetime import datetime
from typing import Optional, Protocol

from fansite.domain.models.refresh_token import RefreshTokenRecord


class RefreshTokenRepository(Protocol):
    def add(self, record: RefreshTokenRecord) -> None:
        ...

    def get(self, token_id: str) -> Optional[RefreshTokenRecord]:
        ...

    def remove(self, token_id: str) -> Optional[RefreshTokenRecord]:
        """Idempotent: removing an unknown id returns None."""
        ...

    def replace(self, old_token_id: str, new_record: RefreshTokenRecord) -> bool:
        """Atomically swap an entry; False (and nothing added) if the old one is gone."""
        ...

    def purge_expired(self, now: datetime) -> int:
        ...

    def count(self) -> int:
        ...
