import logging

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import ApiError
from .schemas import ErrorEnvelope
from .settings import Settings, get_settings
from .routers import items as items_router

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "items",
        "description": "Normalized bucket list items read from the configured sheet, as JSON or JSONP.",
    },
]

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Bucket List Sheet API",
    description="Serves spreadsheet rows as normalized bucket list items over JSON/JSONP.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """
    Render application errors in the shared error envelope.

    Response format:
        {"error": {"code": 404, "message": "Sheet 'list' not found."}}
    """
    return JSONResponse(
        status_code=exc.code,
        content=ErrorEnvelope.build(exc.code, exc.message).to_content(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return the error envelope for request validation errors, with the
    pydantic/fastapi error details under "detail".
    """
    return JSONResponse(
        status_code=422,
        content=ErrorEnvelope.build(
            422, "Request validation failed", detail=jsonable_encoder(exc.errors())
        ).to_content(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error while serving %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorEnvelope.build(500, "Internal server error").to_content(),
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health and the configured sheet backend.
    """
    return {"message": "Healthy", "backend": settings.sheet_backend}


# Include routers
app.include_router(items_router.router)
