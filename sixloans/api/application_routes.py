from fastapi import APIRouter, BackgroundTasks, Depends, status
from typing import Any, Dict

from sixloans.schemas import ApplicationCreateRequest
from sixloans.services.application_service import ApplicationService, get_application_service

router = APIRouter(prefix="/api/applications", tags=["Applications"])


# Submits an application and returns its reference number
@router.post("/", status_code=status.HTTP_201_CREATED)
async def submit_application(
    data: ApplicationCreateRequest,
    background_tasks: BackgroundTasks,
    service: ApplicationService = Depends(get_application_service),
) -> Dict[str, Any]:
    return await service.submit(data, background_tasks)


@router.get("/{application_id}")
async def get_application(
    application_id: int,
    service: ApplicationService = Depends(get_application_service),
) -> Dict[str, Any]:
    return await service.get(application_id)
