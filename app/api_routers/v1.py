from fastapi import APIRouter

from app.features.compliance.routes.compliance import router as compliance_router
from app.features.compliance.routes.sse import router as compliance_sse_router
from app.features.crawler.routes.crawl import router as crawler_router
from app.features.scans.routes.history import router as scans_router

api_router = APIRouter()

# Register all feature routes
api_router.include_router(crawler_router)
api_router.include_router(compliance_router)
api_router.include_router(compliance_sse_router)
api_router.include_router(scans_router)
