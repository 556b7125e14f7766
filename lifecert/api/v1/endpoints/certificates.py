import logging
import traceback
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from lifecert.api.v1.deps import get_certificate_service, require_pensioner
from lifecert.schemas.certificate_schema import (
    CertificateOut,
    CertificateSubmit,
    PhotoUpload,
    SubmissionResult,
)
from lifecert.services.certificate_service import CertificateService, CertificateAlreadySubmitted
from lifecert.services.storage import StorageError

router = APIRouter(prefix="/api/v1/certificates", tags=["certificates"])


@router.post("", response_model=SubmissionResult, status_code=status.HTTP_201_CREATED)
async def submit_certificate(
        witness_name: str = Form(..., min_length=1),
        witness_phone: str = Form(..., min_length=1),
        witness_relationship: str = Form(..., min_length=1),
        photo: Optional[UploadFile] = File(None),
        current_user: dict = Depends(require_pensioner),
        cert_service: CertificateService = Depends(get_certificate_service),
):
    try:
        form = CertificateSubmit(
            witness_name=witness_name,
            witness_phone=witness_phone,
            witness_relationship=witness_relationship,
        )
    except ValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors(include_url=False)]
        )
    upload = None
    if photo is not None and photo.filename:
        upload = PhotoUpload(
            filename=photo.filename,
            content=await photo.read(),
            content_type=photo.content_type,
        )

    try:
        certificate, message = await cert_service.submit(current_user, form, upload)
    except CertificateAlreadySubmitted as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except (StorageError, OSError) as e:
        logging.error(f"Photo upload failed: {e}\n{traceback.format_exc()}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return SubmissionResult(certificate=certificate, message=message)


@router.get("", response_model=list[CertificateOut])
async def list_my_certificates(
        current_user: dict = Depends(require_pensioner),
        cert_service: CertificateService = Depends(get_certificate_service),
):
    return await cert_service.history(current_user['id'])
