import logging
from typing import Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from app.database import Database
from app.models.auth.user import UserCreate, UserProfileUpdate, UserRole
from app.utils.serializers import parse_object_id

logger = logging.getLogger(__name__)


class UserService:
    """Service for user registration, roles and profiles"""

    BEST_CREATORS_LIMIT = 6

    def __init__(self, database: Database):
        self.users = database.users

    async def get_user_by_email(self, email: str) -> Optional[Dict]:
        """Get user by email"""
        return await self.users.find_one({"email": email})

    async def register(self, user_data: UserCreate) -> Optional[Dict]:
        """
        Insert a user on first sign-in.

        Returns the insert result, or ``None`` when a user with the same
        email already exists (including one inserted concurrently, which the
        unique index on ``email`` rejects).
        """
        existing_user = await self.get_user_by_email(user_data.email)
        if existing_user:
            return None

        try:
            return await self.users.insert_one(user_data.model_dump(mode="json"))
        except DuplicateKeyError:
            return None

    async def list_users(self) -> List[Dict]:
        return await self.users.find().to_list(length=None)

    async def get_best_creators(self) -> List[Dict]:
        """Sample of creator accounts for the home page"""
        return await self.users.find(
            {"role": UserRole.CREATOR.value}
        ).limit(self.BEST_CREATORS_LIMIT).to_list(length=None)

    async def get_role(self, email: str) -> str:
        user = await self.get_user_by_email(email)
        return UserRole.from_stored(user.get("role") if user else None).value

    async def set_role(self, user_id: str, role: UserRole):
        result = await self.users.update_one(
            {"_id": parse_object_id(user_id, "user id")},
            {"$set": {"role": role.value}}
        )
        logger.info("Role of user %s set to %s", user_id, role.value)
        return result

    async def delete_user(self, user_id: str):
        return await self.users.delete_one({"_id": parse_object_id(user_id, "user id")})

    async def update_profile(self, email: str, profile: UserProfileUpdate):
        """Upsert profile fields for ``email``; role and email never change here"""
        update = {"$setOnInsert": {"role": UserRole.USER.value}}
        fields = profile.to_update()
        if fields:
            update["$set"] = fields

        return await self.users.update_one({"email": email}, update, upsert=True)
