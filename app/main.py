import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api_routers.v1 import api_router
from app.features.compliance.services.catalogue import get_catalogue
from app.features.health.routes.health import router as health_router
from app.features.proxy.routes.proxy import router as proxy_router
from app.platform.config import settings
from app.platform.db.session import init_db
from app.platform.exceptions import add_exception_handlers

# Configure logging to show INFO level messages
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    # Fail at startup, not on the first scan, if the catalogue and checks disagree
    get_catalogue()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Crawls websites and checks their pages against the DGA Design System rules",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


# Root endpoint for basic info
@app.get("/", tags=["Info"])
def root():
    return {
        "app_name": settings.APP_NAME,
        "description": "DGA Design System v1.0 compliance scanner for government websites.",
        "version": "1.0.0",
        "docs_url": "/docs",
        "api_base": "/api/v1",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

add_exception_handlers(app)

app.include_router(health_router)
app.include_router(proxy_router, prefix="/api")
app.include_router(api_router, prefix="/api/v1")
