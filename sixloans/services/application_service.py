import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import BackgroundTasks, HTTPException, status

from sixloans.database.repositories import (
    ApplicationRepository,
    BeanieApplicationRepository,
    BeanieUserRepository,
    UserRepository,
)
from sixloans.helpers.response_builder import build_application_response
from sixloans.schemas import ApplicationCreateRequest, ApplicationStatusEnum, PeriodEnum, ProductTypeEnum, WITHDRAWABLE_STATUSES
from sixloans.services.notification_service import NotificationService, notification_service
from sixloans.utils.periods import period_start
from sixloans.utils.phone import normalize_phone_number
from sixloans.utils.reference_number import generate_reference_number

logger = logging.getLogger(__name__)

# Product types accepted from the storefront that are stored under another type
PRODUCT_TYPE_ALIASES = {"LOAN_AGAINST_SECURITY": ProductTypeEnum.loan.value}


def _plain_status(value) -> str:
    return getattr(value, "value", value)


def parse_amount(value) -> Optional[float]:
    """Parse user-entered amounts such as '₹ 5,00,000' into a float."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return float(value)
    digits = re.sub(r"[^0-9.]", "", str(value))
    try:
        return float(digits) if digits else None
    except ValueError:
        return None


class ApplicationService:
    def __init__(self, applications: ApplicationRepository, users: UserRepository, notifier: NotificationService):
        self.applications = applications
        self.users = users
        self.notifier = notifier

    async def submit(self, data: ApplicationCreateRequest, background_tasks: Optional[BackgroundTasks] = None) -> Dict[str, Any]:
        product_type = PRODUCT_TYPE_ALIASES.get(data.productType, data.productType)
        if product_type not in {t.value for t in ProductTypeEnum}:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Unsupported product type: {data.productType}"
            )

        phone = normalize_phone_number(data.phone)
        logger.info("Received application: type=%s category=%s", product_type, data.categorySlug)

        user = await self.users.find_by_email_or_phone(data.email, phone)
        if user:
            await self._remember_profile(user, data)

        application_number = await self.applications.next_application_number()
        application = await self.applications.create(
            application_number=application_number,
            user_id=str(user.id) if user else None,
            product_type=product_type,
            product_id=data.productId,
            category_slug=data.categorySlug,
            category_name=data.categoryName,
            status=ApplicationStatusEnum.pending,
            amount=parse_amount(data.loanAmount) or 0,
            applicant_name=data.name or (user.name if user else "User"),
            email=data.email,
            phone=phone,
            pan_number=data.panNumber,
            employment_type=data.employmentType,
            monthly_income=str(data.monthlyIncome) if data.monthlyIncome is not None else None,
            employer_name=data.employerName,
            work_experience=str(data.workExperience) if data.workExperience is not None else None,
            residence_type=data.residenceType,
            city=data.city,
            pincode=data.pincode,
            documents=[doc.model_dump() for doc in data.documents],
        )
        logger.info("Application created: %s", application.application_number)

        application.reference_no = generate_reference_number(application.application_number, product_type, data.categorySlug)
        application = await self.applications.save(application)

        product_name = data.categoryName or product_type.replace("_", " ").title()
        confirmation = (
            self.notifier.send_application_confirmation,
            application.email,
            application.applicant_name,
            product_name,
            product_type,
            application.reference_no,
        )
        if background_tasks is not None:
            background_tasks.add_task(*confirmation)
            logger.info("Confirmation email queued (Ref: %s)", application.reference_no)

        return {
            "success": True,
            "application": build_application_response(application),
            "referenceNo": application.reference_no,
        }

    async def get(self, application_number: int) -> Dict[str, Any]:
        application = await self.applications.get_by_number(application_number)
        if not application:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
        return build_application_response(application)

    async def list(
        self,
        status_filter: Optional[str] = None,
        product_type: Optional[str] = None,
        category_slug: Optional[str] = None,
        period: Optional[PeriodEnum] = None,
        skip: int = 0,
        limit: int = 50,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        filters = {"status": status_filter, "product_type": product_type, "category_slug": category_slug}
        created_from = period_start(period, now or datetime.utcnow())
        items, total = await self.applications.list(filters, skip=skip, limit=limit, created_from=created_from)
        return {
            "data": [build_application_response(a) for a in items],
            "total": total,
            "skip": skip,
            "limit": limit,
        }

    async def update_status(
        self,
        application_number: int,
        new_status: Optional[ApplicationStatusEnum] = None,
        feedback: Optional[str] = None,
    ) -> Dict[str, Any]:
        if new_status is None and feedback is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update")
        application = await self.applications.get_by_number(application_number)
        if not application:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
        if new_status is not None:
            application.status = new_status
        if feedback is not None:
            application.feedback = feedback
        application = await self.applications.save(application)
        logger.info(
            "Application %s updated: status=%s, feedback %s",
            application_number,
            _plain_status(application.status),
            "provided" if feedback else "none",
        )
        return {
            "success": True,
            "message": "Status updated successfully",
            "application": build_application_response(application),
        }

    async def list_for_user(self, user) -> List[Dict[str, Any]]:
        items = await self.applications.list_for_user(str(user.id), user.email)
        return [build_application_response(a) for a in items]

    async def get_for_user(self, user, application_number: int) -> Dict[str, Any]:
        application = await self._owned_application(user, application_number)
        return build_application_response(application)

    async def withdraw(self, user, application_number: int) -> Dict[str, Any]:
        application = await self._owned_application(user, application_number)
        if ApplicationStatusEnum(application.status) not in WITHDRAWABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only pending or in-progress applications can be withdrawn"
            )
        application.status = ApplicationStatusEnum.withdrawn
        application = await self.applications.save(application)
        return {
            "success": True,
            "message": "Application withdrawn successfully",
            "application": build_application_response(application),
        }

    async def _owned_application(self, user, application_number: int):
        application = await self.applications.get_by_number(application_number)
        owned = application is not None and (
            application.user_id == str(user.id) or application.email == user.email
        )
        if not owned:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Application not found")
        return application

    async def _remember_profile(self, user, data: ApplicationCreateRequest) -> None:
        """Copy employment details onto the user's profile for their next application."""
        user.name = data.name or user.name
        user.pan_card = data.panNumber or user.pan_card
        user.city = data.city or user.city
        user.pincode = data.pincode or user.pincode
        user.employment_type = data.employmentType or user.employment_type
        if data.employerName:
            user.employer_name = data.employerName
        if data.workExperience:
            user.work_experience = str(data.workExperience)
        if data.residenceType:
            user.residence_type = data.residenceType
        income = parse_amount(data.monthlyIncome)
        if income is not None:
            user.monthly_income = income
        await self.users.save(user)


application_service = ApplicationService(BeanieApplicationRepository(), BeanieUserRepository(), notification_service)


def get_application_service() -> ApplicationService:
    return application_service
