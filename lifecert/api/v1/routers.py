# lifecert/api/v1/routers.py
from fastapi import APIRouter
from lifecert.api.v1.endpoints import auth, session, certificates, admin

router = APIRouter()

router.include_router(auth.router)
router.include_router(session.router)
router.include_router(certificates.router)
router.include_router(admin.router)
