import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import InvalidTaskError, StoreError, TaskError
from .logging_setup import setup_logging
from .routers import tasks as tasks_router
from .schemas import TITLE_REQUIRED
from .settings import get_settings

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Owner-scoped CRUD operations for tasks and dashboard stats.",
    },
]

_settings = get_settings()
setup_logging(_settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Task Tracker Backend",
    description="Multi-user task tracking API with per-owner access control and pluggable storage.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _jsonable_errors(errors):
    # ctx may hold exception instances that are not JSON serializable
    return [{k: v for k, v in e.items() if k in ("type", "loc", "msg", "input")} for e in errors]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report the first failing rule as a 400.

    Response format:
        {
            "error": "ValidationError",
            "message": "<first error message>",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    errors = exc.errors()
    if not errors:
        message = "Request validation failed"
    elif errors[0].get("type") == "missing" and tuple(errors[0].get("loc", ())) == ("body",):
        # no body at all: the first rule to fail is the title rule
        message = TITLE_REQUIRED
    else:
        message = errors[0]["msg"]
    err = InvalidTaskError(message, detail=_jsonable_errors(errors))
    return JSONResponse(status_code=err.http_status, content=err.to_dict())


@app.exception_handler(TaskError)
async def task_error_handler(request: Request, exc: TaskError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.error(
            "store error on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTPError", "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# PUBLIC_INTERFACE
@app.get("/", summary="Health Check", tags=["health"])
def health_check():
    """
    Health check endpoint.

    Returns:
        A JSON object indicating service health.
    """
    return {"message": "Healthy", "backend": _settings.persistence_backend}


app.include_router(tasks_router.router)
