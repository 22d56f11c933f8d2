from db.client import DATA_ACCESS_ERRORS
from db.models.user import User
from db.repositories.user_repository import UserRepository
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    def get_user_details(self) -> Optional[User]:
        try:
            return self.user_repo.get_current_user()
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"getUserDetails error: {e}")
            return None

    def upsert_user_from_provider(self, provider_user: dict) -> Optional[User]:
        """Mirror the identity provider's user record into the users table"""
        user_metadata = provider_user.get("user_metadata") or {}
        update_data = {
            "id": provider_user["id"],
            "full_name": user_metadata.get("full_name") or user_metadata.get("name"),
            "avatar_url": user_metadata.get("avatar_url"),
        }
        try:
            user = self.user_repo.upsert_user(update_data)
            logger.info(f"Upserted user {user.id} from identity provider")
            return user
        except DATA_ACCESS_ERRORS as e:
            logger.error(f"upsertUser error: {e}")
            return None
