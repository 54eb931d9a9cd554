from enum import Enum


class ProductTypeEnum(str, Enum):
    loan = "LOAN"
    credit_card = "CREDIT_CARD"
    insurance = "INSURANCE"
    app = "APP"


class RoleEnum(str, Enum):
    user = "USER"
    moderator = "MODERATOR"
    admin = "ADMIN"


class ApplicationStatusEnum(str, Enum):
    pending = "PENDING"
    processing = "PROCESSING"
    under_review = "UNDER_REVIEW"
    in_progress = "IN_PROGRESS"
    approved = "APPROVED"
    rejected = "REJECTED"
    disbursed = "DISBURSED"
    withdrawn = "WITHDRAWN"


WITHDRAWABLE_STATUSES = {
    ApplicationStatusEnum.pending,
    ApplicationStatusEnum.processing,
    ApplicationStatusEnum.under_review,
    ApplicationStatusEnum.in_progress,
}


class PeriodEnum(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"
