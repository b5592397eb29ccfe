"""
In-memory implementation of the refresh-token allow-list.
"""

import threading
from datetime import datetime
from typing import Dict, Optional

from fansite.domain.models.refresh_token import RefreshTokenRecord
from fansite.domain.repositories.refresh_token_repository import RefreshTokenRepository


class InMemoryRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self):
        self._records: Dict[str, RefreshTokenRecord] = {}
        self.lock = threading.RLock()

    def add(self, record: RefreshTokenRecord) -> None:
        with self.lock:
            self._records[record.token_id] = record

    def get(self, token_id: str) -> Optional[RefreshTokenRecord]:
        with self.lock:
            return self._records.get(token_id)

    def remove(self, token_id: str) -> Optional[RefreshTokenRecord]:
        with self.lock:
            return self._records.pop(token_id, None)

    def replace(self, old_token_id: str, new_record: RefreshTokenRecord) -> bool:
        with self.lock:
            if self._records.pop(old_token_id, None) is None:
                return False
            self._records[new_record.token_id] = new_record
            return True

    def purge_expired(self, now: datetime) -> int:
        with self.lock:
            expired = [k for k, r in self._records.items() if r.expires_at <= now]
            for key in expired:
                del self._records[key]
            return len(expired)

    def count(self) -> int:
        with self.lock:
            return len(self._records)

    def clear(self) -> None:
        with self.lock:
            self._records.clear()
