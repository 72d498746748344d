"""
FastAPI application for email verification.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.handlers import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    verification_exception_handler,
)
from api.verification import router as verification_router
from config import Config
from verification.dependencies import get_config
from verification.exceptions import VerificationException
from verification.services.error_reporter import init_error_tracking

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown."""
    init_error_tracking(get_config())
    yield


app = FastAPI(
    title="Email Verification API",
    description="Issues and confirms email verification codes",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(VerificationException, verification_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.include_router(verification_router, prefix="/api/v1/email", tags=["email"])
