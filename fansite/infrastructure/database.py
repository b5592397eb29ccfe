"""Process-wide in-memory store. Contents are lost on restart."""

from fansite.infrastructure.repositories.refresh_token_repository import InMemoryRefreshTokenRepository
from fansite.infrastructure.repositories.user_repository import InMemoryUserRepository
from fansite.infrastructure.repositories.video_repository import InMemoryVideoRepository


class InMemoryDatabase:
    def __init__(self):
        self.users = InMemoryUserRepository()
        self.videos = InMemoryVideoRepository()
        self.refresh_tokens = InMemoryRefreshTokenRepository()

    def reset(self) -> None:
        self.users.clear()
        self.videos.clear()
        self.refresh_tokens.clear()


_database = InMemoryDatabase()


def get_db() -> InMemoryDatabase:
    return _database
