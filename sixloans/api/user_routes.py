from fastapi import APIRouter, Depends
from typing import Any, Dict, List

from sixloans.core.auth_dependencies import get_current_user
from sixloans.schemas import ProfileResponse, ProfileUpdateRequest
from sixloans.services.application_service import ApplicationService, get_application_service
from sixloans.services.user_service import UserService, get_user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user=Depends(get_current_user), service: UserService = Depends(get_user_service)):
    return await service.profile(current_user)


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    data: ProfileUpdateRequest,
    current_user=Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return await service.update_profile(current_user, data)


# Applications submitted by the user or under the user's email
@router.get("/applications")
async def my_applications(
    current_user=Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
) -> List[Dict[str, Any]]:
    return await service.list_for_user(current_user)


@router.get("/applications/{application_id}")
async def my_application(
    application_id: int,
    current_user=Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
) -> Dict[str, Any]:
    return await service.get_for_user(current_user, application_id)


@router.put("/applications/{application_id}/withdraw")
async def withdraw_application(
    application_id: int,
    current_user=Depends(get_current_user),
    service: ApplicationService = Depends(get_application_service),
) -> Dict[str, Any]:
    return await service.withdraw(current_user, application_id)
