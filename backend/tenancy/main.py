"""FastAPI application entry point."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tenancy.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from tenancy.api.routes import me, members, metrics, organizations, tasks
from tenancy.core.config import get_settings
from tenancy.core.exceptions import DomainError, ValidationError
from tenancy.core.validation import describe_errors

settings = get_settings()
docs_enabled = settings.api_docs_enabled
if docs_enabled is None:
    docs_enabled = settings.environment != "production"

app = FastAPI(
    title="Tenancy API",
    description="Organizations, memberships and tenant-scoped resources",
    version="1.0.0",
    docs_url="/api/docs" if docs_enabled else None,
    redoc_url="/api/redoc" if docs_enabled else None,
    openapi_url="/api/openapi.json" if docs_enabled else None,
)

# Middleware configuration (order matters - applied in reverse order)
# 1. Request logging (outermost - logs all requests)
app.add_middleware(RequestLoggingMiddleware)

# 2. Security headers
app.add_middleware(SecurityHeadersMiddleware)

# 3. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render rejections as ErrorResponse bodies naming the rule that failed."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.code,
            "message": exc.message,
            "details": exc.details,
            "detail": exc.message,
        },
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render body and query validation failures in the same ErrorResponse shape."""
    details = describe_errors(exc.errors())
    field, message = next(iter(details.items()), ("body", "Request validation failed"))
    return await domain_error_handler(request, ValidationError(field, message, details=details))


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


app.include_router(organizations.router, prefix="/api/organizations", tags=["organizations"])
app.include_router(members.router, prefix="/api/members", tags=["members"])
app.include_router(me.router, prefix="/api", tags=["profile"])
app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
app.include_router(metrics.router, prefix="/api", tags=["metrics"])
