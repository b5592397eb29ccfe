"""Owner/admin gate shared by the auth gateway and the video pipeline."""

from typing import Optional, Union

from fansite.core.exceptions import ForbiddenError
from fansite.domain.models.user import User
from fansite.domain.models.video import Video

READ = "read"
UPDATE = "update"
DELETE = "delete"


def can_access(user: Optional[User], resource: Union[User, Video], action: str) -> bool:
    """Return True if `user` (None for anonymous) may perform `action` on `resource`.

    Videos: public ones are readable by anyone, private ones only by their
    owner; updates and deletes need the owner or an admin.
    Users: only the user themself or an admin.
    """
    if isinstance(resource, Video):
        is_owner = user is not None and user.id == resource.owner_id
        if action == READ:
            return resource.is_public or is_owner
        return is_owner or (user is not None and user.is_admin)

    if isinstance(resource, User):
        return user is not None and (user.id == resource.id or user.is_admin)

    return False


def ensure_access(user: Optional[User], resource: Union[User, Video], action: str) -> None:
    if not can_access(user, resource, action):
        raise ForbiddenError()
