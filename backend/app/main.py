import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import init_db
from app.routers import auth, documents, media, profile
from app.services.media_store import CloudinaryMediaStore
from app.services.upload_gateway import UploadRejected
from app.utils.filesystem import ensure_data_dir

logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.setLevel(settings.log_level)
    # Missing media store credentials stop the boot here, not on first upload.
    app.state.media_store = CloudinaryMediaStore(settings.media_store_config())
    ensure_data_dir()
    init_db()
    logger.info("Database ready at %s", settings.db_path)
    yield


app = FastAPI(
    title="Leave Management Documents",
    description="Leave request document upload, retrieval and deletion",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": "Validation failed",
            "errors": [
                {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in exc.errors()
            ],
        },
    )


@app.exception_handler(UploadRejected)
async def upload_rejected_handler(request: Request, exc: UploadRejected):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": "File rejected", "error": str(exc)},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "error": str(exc)},
    )


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(documents.router, prefix=settings.api_prefix)
app.include_router(media.router, prefix=settings.api_prefix)
app.include_router(profile.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}


def run():
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
