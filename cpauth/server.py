"""FastAPI transport for the Chaum-Pedersen authentication service."""

from __future__ import annotations

import logging
from typing import NoReturn, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from .config import Settings, configure_logging
from .coordinator import AuthCoordinator
from .errors import (
    AuthError,
    AuthLookupError,
    MalformedValue,
    ProofRejected,
    SessionCapacityExceeded,
    UserAlreadyExists,
)

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Authentication failed"


class ParametersResponse(BaseModel):
    name: str
    p: str
    q: str
    alpha: str
    beta: str
    fingerprint: str


class RegisterRequest(BaseModel):
    user: str
    y1: str
    y2: str


class RegisterResponse(BaseModel):
    pass


class ChallengeRequest(BaseModel):
    user: str
    r1: str
    r2: str


class ChallengeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auth_id: str = Field(alias="authId")
    c: str


class VerifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auth_id: str = Field(alias="authId")
    s: str


class VerifyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")


def _decode_hex(value: str, field: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as exc:
        raise MalformedValue(f"{field} must be hex encoded") from exc


def create_app(
    coordinator: Optional[AuthCoordinator] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or Settings()
    coordinator = coordinator or settings.build_coordinator()

    def fail(exc: AuthError) -> NoReturn:
        if isinstance(exc, MalformedValue):
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if isinstance(exc, UserAlreadyExists):
            raise HTTPException(status_code=409, detail="User already exists") from exc
        if isinstance(exc, SessionCapacityExceeded):
            raise HTTPException(status_code=503, detail="Try again later") from exc
        if isinstance(exc, (AuthLookupError, ProofRejected)):
            # unknown user and wrong proof look the same to the caller
            detail = exc.code if settings.expose_error_codes else GENERIC_FAILURE
            raise HTTPException(status_code=401, detail=detail) from exc
        raise HTTPException(status_code=500, detail="Internal error") from exc

    app = FastAPI(
        title="cpauth",
        description="Chaum-Pedersen zero-knowledge authentication",
    )
    app.state.coordinator = coordinator

    @app.get("/parameters", response_model=ParametersResponse)
    def parameters() -> ParametersResponse:
        return ParametersResponse(**coordinator.params.to_dict())

    @app.post("/register", response_model=RegisterResponse)
    def register(request: RegisterRequest) -> RegisterResponse:
        try:
            coordinator.handle_register(
                request.user,
                _decode_hex(request.y1, "y1"),
                _decode_hex(request.y2, "y2"),
            )
        except AuthError as exc:
            fail(exc)
        return RegisterResponse()

    @app.post("/challenge", response_model=ChallengeResponse)
    def challenge(request: ChallengeRequest) -> ChallengeResponse:
        try:
            issued = coordinator.handle_challenge(
                request.user,
                _decode_hex(request.r1, "r1"),
                _decode_hex(request.r2, "r2"),
            )
        except AuthError as exc:
            fail(exc)
        return ChallengeResponse(auth_id=issued.auth_id, c=issued.c.hex())

    @app.post("/verify", response_model=VerifyResponse)
    def verify(request: VerifyRequest) -> VerifyResponse:
        try:
            session_id = coordinator.handle_verify(
                request.auth_id, _decode_hex(request.s, "s")
            )
        except AuthError as exc:
            fail(exc)
        return VerifyResponse(session_id=session_id)

    return app


def _app_from_env() -> FastAPI:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info("Serving group %s (%s)", settings.group_name, settings.params.fingerprint())
    return create_app(settings=settings)


app = _app_from_env()


__all__ = ["app", "create_app", "GENERIC_FAILURE"]
