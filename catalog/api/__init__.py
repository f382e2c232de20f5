"""API 라우터 패키지 — 모든 카탈로그 엔드포인트 통합.

API Router package — Aggregates all catalog endpoints into a single
router for inclusion in the FastAPI application.

Included routers:
    - categories: 카테고리 CRUD, 삭제 미리보기/삭제/일괄 삭제/재개
                  (Category CRUD, deletion preview, deletion, bulk deletion, resume)
    - services: 서비스 CRUD, 끊어진 서비스 조회 (Service CRUD, orphaned services)
"""

from fastapi import APIRouter

from catalog.api.categories import router as categories_router
from catalog.api.services import router as services_router

api_router: APIRouter = APIRouter()

api_router.include_router(categories_router, prefix="/categories", tags=["Categories"])
api_router.include_router(services_router, prefix="/services", tags=["Services"])
