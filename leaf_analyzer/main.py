# leaf_analyzer/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from leaf_analyzer.api.routes import router as api_router
from leaf_analyzer.config import get_settings
from leaf_analyzer.models.leaf_analysis import ErrorResponse

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Leaf Analyzer API",
    description="API for plant leaf health analysis",
    version="0.1.0",
    debug=settings.DEBUG,
)

# CORS-Middleware für Frontend-Integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routen einbinden
app.include_router(api_router, prefix=settings.API_PREFIX)


def _error_response(status_code: int, error: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(by_alias=True, exclude_none=True),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        error = ErrorResponse(**exc.detail)
    elif exc.status_code == 404:
        error = ErrorResponse(error="Endpoint not found")
    else:
        error = ErrorResponse(error=str(exc.detail))
    return _error_response(exc.status_code, error)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(422, ErrorResponse(error="Invalid request", message=str(exc.errors())))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return _error_response(500, ErrorResponse(error="Internal server error"))


# Root-Endpunkt
@app.get("/", tags=["Health"])
async def root():
    return {"message": "Welcome to Leaf Analyzer API", "status": "active"}


# Angepasste OpenAPI-Dokumentation
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Leaf Analyzer API",
        version="0.1.0",
        description="API zur Analyse der Gesundheit von Pflanzenblättern",
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Leaf Analyzer Backend running on port {settings.PORT}")
    logger.info(f"Health check available at: http://localhost:{settings.PORT}{settings.API_PREFIX}/health")
    uvicorn.run("leaf_analyzer.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)
