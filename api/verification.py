"""Email verification API routes."""

from __future__ import annotations

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status

from verification.config import VerificationConfig
from verification.dependencies import (
    get_config,
    get_verification_service,
    set_request_count_cookie,
)
from verification.exceptions import VerificationException
from verification.schemas import ApiResponse, EmailConfirmRequest, EmailSendRequest
from verification.services.verification_service import VerificationService

router = APIRouter()

REQUEST_COUNT_COOKIE = get_config().REQUEST_COUNT_COOKIE_NAME


def _confirmation_response(verified: bool) -> ApiResponse:
    return ApiResponse(
        success=verified,
        message="Email verified" if verified else "Invalid or expired verification code",
        data={"verified": verified},
    )


@router.post("/send", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def send_code(
    payload: EmailSendRequest,
    response: Response,
    request_count: str | None = Cookie(default=None, alias=REQUEST_COUNT_COOKIE),
    config: VerificationConfig = Depends(get_config),
    verification_service: VerificationService = Depends(get_verification_service),
) -> ApiResponse:
    try:
        ticket = await verification_service.issue_and_send(payload.email, request_count)
    except VerificationException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    set_request_count_cookie(response, ticket, config)
    return ApiResponse(
        success=True,
        message="Verification code sent to your email",
        data={"request_count": ticket.count},
    )


@router.post("/verify", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def verify_signup_code(
    payload: EmailConfirmRequest,
    verification_service: VerificationService = Depends(get_verification_service),
) -> ApiResponse:
    try:
        verified = await verification_service.verify_for_signup(payload.email, payload.code)
    except VerificationException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return _confirmation_response(verified)


@router.post("/reset/verify", response_model=ApiResponse, status_code=status.HTTP_200_OK)
async def verify_reset_code(
    payload: EmailConfirmRequest,
    verification_service: VerificationService = Depends(get_verification_service),
) -> ApiResponse:
    try:
        verified = await verification_service.verify_for_reset(payload.email, payload.code)
    except VerificationException as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
    return _confirmation_response(verified)
