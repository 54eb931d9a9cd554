import logging
from typing import Any, Dict

from fastapi import HTTPException, status

from sixloans.database.repositories import BeanieUserRepository, UserRepository
from sixloans.helpers.response_builder import build_profile_response, build_user_response
from sixloans.schemas import ProfileUpdateRequest, RoleEnum

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepository):
        self.users = users

    async def profile(self, user) -> Dict[str, Any]:
        return build_profile_response(user)

    async def update_profile(self, user, data: ProfileUpdateRequest) -> Dict[str, Any]:
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(user, field, value)
        user = await self.users.save(user)
        return build_profile_response(user)

    async def list_users(self, skip: int = 0, limit: int = 50) -> Dict[str, Any]:
        users, total = await self.users.list(skip=skip, limit=limit)
        return {"data": [build_user_response(u) for u in users], "total": total, "skip": skip, "limit": limit}

    async def set_role(self, actor, user_id: str, role: RoleEnum) -> Dict[str, Any]:
        if str(actor.id) == user_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own role")
        user = await self.users.get(user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        user.role = role
        # Tokens carry the role, so outstanding ones must be reissued
        user.token_version = (user.token_version or 0) + 1
        user = await self.users.save(user)
        logger.info("User %s role set to %s by %s", user_id, role.value, actor.id)
        return {"success": True, "user": build_user_response(user)}


user_service = UserService(BeanieUserRepository())


def get_user_service() -> UserService:
    return user_service
