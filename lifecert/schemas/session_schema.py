from typing import Literal, Optional, Union

from pydantic import BaseModel

from lifecert.schemas.certificate_schema import AdminOverview, CertificateOut
from lifecert.schemas.user_schema import UserOut

View = Literal["sign_in", "pensioner_dashboard", "admin_dashboard"]


class HeaderOut(BaseModel):
    system_name: str
    full_name: str
    role: str
    role_badge: Optional[str] = None


class SessionOut(BaseModel):
    authenticated: bool
    view: View
    user: Optional[UserOut] = None
    header: Optional[HeaderOut] = None


class PensionerDashboard(BaseModel):
    view: Literal["pensioner_dashboard"] = "pensioner_dashboard"
    welcome: str
    current_month: int
    current_year: int
    current_period_label: str
    submitted_this_period: bool
    history: list[CertificateOut]


class AdminDashboard(BaseModel):
    view: Literal["admin_dashboard"] = "admin_dashboard"
    overview: AdminOverview


DashboardOut = Union[PensionerDashboard, AdminDashboard]
