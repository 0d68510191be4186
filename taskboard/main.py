"""Main FastAPI application for the task API."""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskboard.db.init import init_db
from taskboard.errors import ErrorKind, TaskError
from taskboard.middleware.cors import add_cors_middleware
from taskboard.routers import tasks_router
from taskboard.utils.logger import configure_logging, get_logger

configure_logging()
api_logger = get_logger("taskboard.api")

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database tables on startup."""
    init_db()
    api_logger.info("Application startup complete.")
    yield


# Create FastAPI application
app = FastAPI(
    title="Task Board API",
    description="REST API for hierarchical tasks and sub-tasks",
    version=API_VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
add_cors_middleware(app)


@app.exception_handler(TaskError)
async def task_error_handler(request: Request, exc: TaskError):
    """Render domain errors as {error, code}, choosing the status from the error kind."""
    if exc.kind is ErrorKind.INTERNAL:
        api_logger.exception("task.internal_error", path=request.url.path, code=exc.code)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "code": "INTERNAL_SERVER_ERROR"},
        )

    api_logger.warning(
        "task.request_rejected",
        path=request.url.path,
        method=request.method,
        code=exc.code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    api_logger.warning("task.invalid_body", path=request.url.path, errors=exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Request body must be valid JSON", "code": "INVALID_REQUEST_BODY"},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(status_code=404, content={"error": "Route not found", "code": "NOT_FOUND"})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": f"HTTP_{exc.status_code}"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Unexpected failures are logged with traceback and never exposed in detail."""
    api_logger.exception("task.unhandled_error", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "INTERNAL_SERVER_ERROR"},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": API_VERSION}


@app.get("/")
async def root():
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to the Task Board API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
    }


app.include_router(tasks_router, prefix="/api")  # Task endpoints: /api/tasks


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "taskboard.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
