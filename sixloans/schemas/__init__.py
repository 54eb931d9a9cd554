from sixloans.schemas.enums import ProductTypeEnum, RoleEnum, ApplicationStatusEnum, PeriodEnum, WITHDRAWABLE_STATUSES
from sixloans.schemas.user_schemas import (
    SignupRequest,
    EmailRequest,
    OtpVerifyRequest,
    LoginRequest,
    ResetPasswordRequest,
    UserResponse,
    AuthResponse,
    RoleUpdateRequest,
    ProfileResponse,
    ProfileUpdateRequest,
)
from sixloans.schemas.application_schema import ApplicationCreateRequest, StatusUpdateRequest, DocumentLink
from sixloans.schemas.product_schema import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate
