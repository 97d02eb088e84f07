from huddle.models.base import Base
from huddle.models.friendship import Friendship, FriendshipStatus
from huddle.models.profile import Profile

__all__ = [
    "Base",
    "Friendship",
    "FriendshipStatus",
    "Profile",
]
