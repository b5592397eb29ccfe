"""Refresh-token allow-list entry."""

from datetime import datetime

from pydantic import BaseModel


class RefreshTokenRecord(BaseModel):
    token_id: str  # sha256 of the encoded token
    user_id: str
    expires_at: datetime

    def __repr__(self):
        return f"<RefreshToken {self.token_id[:12]} user={self.user_id}>"
