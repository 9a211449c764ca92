import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .config import get_settings
from .database import async_session_maker, init_db
from .exceptions import ServiceException, document_validation_handler, service_exception_handler
from .routers import profile_router
from .services.document_store import DocumentStore
from .services.profile_session import SessionRegistry
from .services.profile_sync import ProfileSyncService

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await init_db()
    yield
    # Shutdown
    await app.state.registry.close_all()


def create_app(registry: SessionRegistry = None, sync_service: ProfileSyncService = None) -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description="Candidate profile reconciliation and resume parsing API",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,  # Disable docs in production
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.registry = registry or SessionRegistry(store=DocumentStore(async_session_maker))
    app.state.sync_service = sync_service or ProfileSyncService()

    # CORS middleware - uses origins from environment variable
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceException, service_exception_handler)
    app.add_exception_handler(ValidationError, document_validation_handler)
    app.include_router(profile_router)

    @app.get("/")
    async def root():
        return {"message": settings.app_name, "status": "running", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        """Health check endpoint for load balancer"""
        return {"status": "healthy"}

    return app


app = create_app()
