"""FastAPI application entrypoint. No business logic; only wiring, middleware and error handlers."""

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import (
    service_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.api.v1 import router as v1_router
from app.core.config import settings
from app.core.errors import ServiceError

app = FastAPI(
    title="Superadmin Back-Office API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "Superadmin Back-Office API"}
