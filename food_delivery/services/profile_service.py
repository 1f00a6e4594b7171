"""
Customer profile service.

Read and update the authenticated customer's own account.
"""

import logging

from ..auth import UserStore, User
from ..errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name")


class ProfileService:
    """Service for the current customer's profile."""

    def __init__(self, users: UserStore):
        self.users = users

    def get_profile(self, user_id: str) -> User:
        user = self.users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, changes: dict) -> User:
        """
        Apply a partial profile update. Empty values clear a field.

        Raises:
            NotFoundError: Unknown user
            ValidationError: Field outside PROFILE_FIELDS
        """
        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        user = self.get_profile(user_id)
        for name, value in changes.items():
            setattr(user, name, value or None)

        user = self.users.update_user(user)
        logger.info(f"Profile updated for user {user_id}")
        return user
