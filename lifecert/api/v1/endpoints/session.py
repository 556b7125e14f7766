from typing import Optional

from fastapi import APIRouter, Depends

from lifecert.api.v1.deps import get_optional_user, get_current_user, get_certificate_service
from lifecert.core.config import settings
from lifecert.core.utils import current_period, period_label
from lifecert.schemas.session_schema import (
    SessionOut,
    HeaderOut,
    DashboardOut,
    PensionerDashboard,
    AdminDashboard,
)
from lifecert.services.certificate_service import CertificateService

router = APIRouter(prefix="/api/v1", tags=["session"])


def view_for(user: Optional[dict]) -> str:
    if user is None:
        return "sign_in"
    return "admin_dashboard" if user['role'] == "admin" else "pensioner_dashboard"


@router.get("/session", response_model=SessionOut)
async def read_session(user: Optional[dict] = Depends(get_optional_user)):
    if user is None:
        return SessionOut(authenticated=False, view="sign_in")
    header = HeaderOut(
        system_name=settings.SYSTEM_NAME,
        full_name=user['full_name'],
        role=user['role'],
        role_badge="Admin" if user['role'] == "admin" else None,
    )
    return SessionOut(authenticated=True, view=view_for(user), user=user, header=header)


@router.get("/dashboard", response_model=DashboardOut)
async def read_dashboard(
        current_user: dict = Depends(get_current_user),
        cert_service: CertificateService = Depends(get_certificate_service),
):
    if view_for(current_user) == "admin_dashboard":
        return AdminDashboard(overview=await cert_service.overview())

    month, year = current_period()
    history = await cert_service.history(current_user['id'])
    submitted = any(c['month'] == month and c['year'] == year for c in history)
    return PensionerDashboard(
        welcome=f"Welcome, {current_user['full_name']}",
        current_month=month,
        current_year=year,
        current_period_label=period_label(month, year),
        submitted_this_period=submitted,
        history=history,
    )
