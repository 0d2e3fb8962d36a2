import os
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from datetime import datetime
import logging

# Load environment variables as early as possible
load_dotenv()

from .config import Settings, settings
from .middleware import SecurityMiddleware, LoggingMiddleware, ErrorHandlingMiddleware, RequestSizeLimitMiddleware
from .exceptions import UploadError, http_exception_handler, upload_error_handler
from .application.services.image_validator import ImageValidator
from .application.services.upload_service import UploadService
from .infrastructure.cache.memory_upload_cache import InMemoryUploadCache
from .infrastructure.storage.local_storage import LocalStorageRepository
from .routers import uploads_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def build_upload_service(app_settings: Settings) -> UploadService:
    return UploadService(
        cache=InMemoryUploadCache(max_entries=app_settings.UPLOAD_CACHE_MAX_ENTRIES),
        store=LocalStorageRepository(app_settings.UPLOAD_DIR, base_url=app_settings.BASE_URL),
        validator=ImageValidator(
            allowed_types=app_settings.ALLOWED_IMAGE_TYPES,
            max_file_size=app_settings.MAX_FILE_SIZE,
            compression_threshold=app_settings.COMPRESSION_THRESHOLD,
        ),
        settings=app_settings,
    )


def create_app(app_settings: Settings = settings) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"Starting {app_settings.APP_NAME}...")
        app.state.upload_service = build_upload_service(app_settings)
        logger.info(f"Upload pipeline ready (persistence: {app_settings.PERSISTENCE_MODE})")
        yield
        # Shutdown
        logger.info(f"Shutting down {app_settings.APP_NAME}...")

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        debug=app_settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if app_settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if app_settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if app_settings.DOCS_ENABLED else None)
    )

    # Add custom exception handlers
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(UploadError, upload_error_handler)

    # Add middleware
    app.add_middleware(ErrorHandlingMiddleware, debug=app_settings.DEBUG)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_request_size=app_settings.MAX_REQUEST_SIZE)

    # GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=app_settings.GZIP_MIN_SIZE)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount static files for remotely stored images
    os.makedirs(app_settings.UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=app_settings.UPLOAD_DIR), name="uploads")

    app.include_router(uploads_router.router)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        service = getattr(app.state, "upload_service", None)
        return {
            "status": "healthy" if service is not None else "starting",
            "service": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "timestamp": datetime.utcnow().isoformat(),
            "uploads": {
                "persistence_mode": app_settings.PERSISTENCE_MODE,
                "max_file_size": app_settings.MAX_FILE_SIZE,
                "cached_images": len(service.cache) if service is not None else 0
            }
        }

    return app


app = create_app()


# ------------------------
# Run with correct PORT in local/production
# ------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,  # the upload cache is process-local
        log_level=settings.LOG_LEVEL.lower()
    )
