from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from lifecert.api.v1.deps import get_certificate_service, require_admin
from lifecert.schemas.certificate_schema import (
    AdminOverview,
    CertificateDetail,
    ReviewIn,
    ReviewResult,
)
from lifecert.schemas.user_schema import UserOut
from lifecert.services.certificate_service import (
    CertificateService,
    CertificateNotFound,
    ReviewConflict,
)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/overview", response_model=AdminOverview)
async def read_overview(
        _: dict = Depends(require_admin),
        cert_service: CertificateService = Depends(get_certificate_service),
):
    return await cert_service.overview()


@router.get("/pensioners", response_model=list[UserOut])
async def list_pensioners(
        _: dict = Depends(require_admin),
        cert_service: CertificateService = Depends(get_certificate_service),
):
    return await cert_service.pensioners()


@router.get("/certificates/{certificate_id}", response_model=CertificateDetail)
async def read_certificate(
        certificate_id: UUID,
        _: dict = Depends(require_admin),
        cert_service: CertificateService = Depends(get_certificate_service),
):
    try:
        return await cert_service.detail(certificate_id)
    except CertificateNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/certificates/{certificate_id}/review", response_model=ReviewResult)
async def review_certificate(
        certificate_id: UUID,
        body: ReviewIn,
        admin: dict = Depends(require_admin),
        cert_service: CertificateService = Depends(get_certificate_service),
):
    try:
        certificate = await cert_service.review(
            certificate_id,
            admin,
            status=body.status,
            admin_notes=body.admin_notes,
            expected_status=body.expected_status,
        )
    except CertificateNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ReviewConflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ReviewResult(certificate=certificate, overview=await cert_service.overview())
