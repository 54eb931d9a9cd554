import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sixloans.database.repositories import (
    ApplicationRepository,
    BeanieApplicationRepository,
    BeanieCatalogRepository,
    BeanieUserRepository,
    CatalogRepository,
    UserRepository,
)
from sixloans.helpers.response_builder import build_application_response
from sixloans.schemas import ProductTypeEnum
from sixloans.utils.periods import format_trend, month_bounds

logger = logging.getLogger(__name__)

RECENT_APPLICATIONS = 5


class DashboardService:
    """Headline numbers for the admin dashboard."""

    def __init__(self, applications: ApplicationRepository, users: UserRepository, catalog: CatalogRepository):
        self.applications = applications
        self.users = users
        self.catalog = catalog

    async def stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Totals across users, products and applications, plus month over month
        trends. The current month counts from its first day up to ``now`` and
        is compared against the whole previous calendar month.
        """
        now = now or datetime.utcnow()
        last_month, this_month = month_bounds(now)

        products = await self.catalog.count_products_by_type()
        total_loans = products.get(ProductTypeEnum.loan.value, 0)
        total_cards = products.get(ProductTypeEnum.credit_card.value, 0)
        total_insurance = products.get(ProductTypeEnum.insurance.value, 0)
        total_apps = products.get(ProductTypeEnum.app.value, 0)

        user_trend = format_trend(
            await self.users.count(created_from=this_month),
            await self.users.count(created_from=last_month, created_to=this_month),
        )
        app_trend = format_trend(
            await self.applications.count(created_from=this_month),
            await self.applications.count(created_from=last_month, created_to=this_month),
        )

        recent = await self.applications.recent(RECENT_APPLICATIONS)
        logger.debug("Dashboard stats computed for %s", now.isoformat())
        return {
            "totalUsers": await self.users.count(),
            "totalLoans": total_loans,
            "totalCreditCards": total_cards,
            "totalInsurance": total_insurance,
            "totalApps": total_apps,
            "totalProducts": sum(products.values()),
            "totalApplications": await self.applications.count(),
            "userTrend": user_trend,
            "appTrend": app_trend,
            "recentApplications": [build_application_response(a) for a in recent],
            "byStatus": await self.applications.count_by("status"),
            "byType": await self.applications.count_by("product_type"),
        }


dashboard_service = DashboardService(BeanieApplicationRepository(), BeanieUserRepository(), BeanieCatalogRepository())


def get_dashboard_service() -> DashboardService:
    return dashboard_service
