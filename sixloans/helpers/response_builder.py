from datetime import datetime
from typing import Any, Dict


def _plain(value):
    """Unwrap enums and render datetimes as ISO strings."""
    if isinstance(value, datetime):
        return value.isoformat()
    return getattr(value, "value", value)


def build_user_response(user) -> Dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": _plain(user.role),
        "email_verified": bool(getattr(user, "email_verified", False)),
    }


def build_profile_response(user) -> Dict[str, Any]:
    profile = build_user_response(user)
    for field in (
        "pan_card",
        "city",
        "pincode",
        "employment_type",
        "employer_name",
        "work_experience",
        "residence_type",
        "monthly_income",
        "email_verified_at",
        "created_at",
    ):
        profile[field] = _plain(getattr(user, field, None))
    return profile


def build_application_response(application) -> Dict[str, Any]:
    documents = [
        doc.model_dump() if hasattr(doc, "model_dump") else dict(doc)
        for doc in (getattr(application, "documents", None) or [])
    ]
    return {
        "id": application.application_number,
        "referenceNo": application.reference_no,
        "type": _plain(application.product_type),
        "productId": application.product_id,
        "categorySlug": application.category_slug,
        "categoryName": application.category_name,
        "status": _plain(application.status),
        "feedback": getattr(application, "feedback", None),
        "amount": application.amount,
        "applicantName": application.applicant_name,
        "email": application.email,
        "phone": application.phone,
        "userId": application.user_id,
        "documents": documents,
        "createdAt": _plain(application.created_at),
        "updatedAt": _plain(getattr(application, "updated_at", None)),
    }


def build_category_response(category) -> Dict[str, Any]:
    return {
        "id": str(category.id),
        "name": category.name,
        "slug": category.slug,
        "type": _plain(category.type),
        "description": category.description,
        "display_order": category.display_order,
    }


def build_product_response(product) -> Dict[str, Any]:
    return {
        "id": str(product.id),
        "product_type": _plain(product.product_type),
        "title": product.title,
        "slug": product.slug,
        "provider_name": product.provider_name,
        "category_slug": product.category_slug,
        "summary": product.summary,
        "features": list(product.features or []),
        "details": dict(product.details or {}),
        "is_active": product.is_active,
    }
