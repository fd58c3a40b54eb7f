"""
API 라우터
"""

from fastapi import APIRouter

from app.api.admin.cleanup import router as cleanup_router
from app.api.uploads import router as uploads_router

router = APIRouter()

router.include_router(uploads_router, prefix="/api/uploads")
router.include_router(cleanup_router, prefix="/api/admin")
