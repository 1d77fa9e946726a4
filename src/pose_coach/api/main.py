"""
FastAPI entry point for the pose validation service.

Endpoints:
    GET    /health
    GET    /api/exercises
    POST   /api/sessions                        start validating an exercise
    POST   /api/sessions/{session_id}/frames    validate one keypoint frame
    POST   /api/sessions/{session_id}/reset     start a new set
    DELETE /api/sessions/{session_id}           dispose the session

Run:
    uvicorn pose_coach.api.main:app --host 0.0.0.0 --port 8000 --reload
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..config import LOG_FORMAT, LOG_LEVEL, SESSION_TTL_SECONDS
from ..exceptions import UnknownExercise, ValidatorUnavailable
from ..exercises.registry import ExerciseRegistry, get_default_registry
from ..validation.dispatch import Validator, create_validator, is_native_supported
from ..validation.state import ValidationResult
from .cache import SessionCache

logger = logging.getLogger("pose_coach")
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


# ============================================================================
# Pydantic request / response models
# ============================================================================

class CreateSessionRequest(BaseModel):
    exercise_id: str = Field(..., description="Registered exercise id, e.g. 'bodyweight-squat'")
    confidence_threshold: Optional[float] = Field(
        default=None, ge=0.0, le=1.0,
        description="Override for the keypoint score cutoff",
    )


class CreateSessionResponse(BaseModel):
    session_id: str
    exercise_id: str
    kind: str = Field(..., description="'native' or 'fallback'")


class FrameRequest(BaseModel):
    keypoints: dict[str, Any] = Field(
        ..., description="Joint name -> {x, y, score}; unusable keypoints are ignored"
    )


class ResetResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str
    rep_count: int = Field(alias="repCount")


class ExerciseSummary(BaseModel):
    id: str
    name: str


class ErrorResponse(BaseModel):
    error_code: str
    message: str


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error_code": code, "message": message},
    )


# ============================================================================
# App lifecycle — load exercise definitions on startup
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the exercise registry once and report the active backend."""
    logger.info("Starting pose validation service …")
    if getattr(app.state, "registry", None) is None:
        app.state.registry = get_default_registry()
    logger.info(
        "%d exercises loaded — native validator %s.",
        len(app.state.registry),
        "available" if is_native_supported() else "unavailable",
    )
    yield
    logger.info("Shutting down (%d live sessions dropped).", len(app.state.sessions))


app = FastAPI(
    title="Pose Coach Validation API",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.registry = None
app.state.sessions = SessionCache(ttl_seconds=SESSION_TTL_SECONDS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(part) for part in first.get("loc", ()))
    return _error(422, "INVALID_REQUEST", f"{where}: {first.get('msg', 'invalid request')}")


def _registry() -> ExerciseRegistry:
    if app.state.registry is None:
        app.state.registry = get_default_registry()
    return app.state.registry


def _sessions() -> SessionCache[Validator]:
    return app.state.sessions


def _session_not_found(session_id: str) -> JSONResponse:
    return _error(404, "SESSION_NOT_FOUND", f"Session '{session_id}' does not exist or has expired.")


# ============================================================================
# Health-check / catalogue
# ============================================================================

@app.get("/health")
def health():
    return {"status": "ok", "native": is_native_supported()}


@app.get("/api/exercises", response_model=list[ExerciseSummary])
def list_exercises():
    return [
        ExerciseSummary(id=d.id, name=d.name or d.id)
        for d in _registry()
    ]


# ============================================================================
# Sessions
# ============================================================================

@app.post(
    "/api/sessions",
    response_model=CreateSessionResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
def create_session_endpoint(request: CreateSessionRequest):
    """Create a validator for one exercise screen."""
    sessions = _sessions()
    sessions.purge_expired()
    try:
        validator = create_validator(
            request.exercise_id,
            registry=_registry(),
            confidence_threshold=request.confidence_threshold,
        )
    except UnknownExercise as exc:
        return _error(404, "UNKNOWN_EXERCISE", str(exc))
    except ValidatorUnavailable as exc:
        logger.error("Validator unavailable for '%s': %s", request.exercise_id, exc)
        return _error(503, "VALIDATOR_UNAVAILABLE", str(exc))

    session_id = uuid.uuid4().hex
    sessions.put(session_id, validator)
    logger.info(
        "Session %s started: exercise='%s' kind=%s",
        session_id, request.exercise_id, validator.kind,
    )
    return CreateSessionResponse(
        session_id=session_id,
        exercise_id=request.exercise_id,
        kind=validator.kind,
    )


@app.post(
    "/api/sessions/{session_id}/frames",
    response_model=ValidationResult,
    responses={404: {"model": ErrorResponse}},
)
def validate_frame(session_id: str, request: FrameRequest):
    """Validate one keypoint frame against the session's exercise."""
    validator = _sessions().get(session_id)
    if validator is None:
        return _session_not_found(session_id)

    result = validator.validate_pose(request.keypoints)
    if result.rep_detected:
        logger.info("Session %s: rep %d", session_id, result.rep_count)
    return result


@app.post(
    "/api/sessions/{session_id}/reset",
    response_model=ResetResponse,
    responses={404: {"model": ErrorResponse}},
)
def reset_session(session_id: str):
    validator = _sessions().get(session_id)
    if validator is None:
        return _session_not_found(session_id)
    validator.reset()
    return ResetResponse(session_id=session_id, rep_count=validator.rep_count)


@app.delete(
    "/api/sessions/{session_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
)
def delete_session(session_id: str):
    if not _sessions().delete(session_id):
        return _session_not_found(session_id)
    logger.info("Session %s disposed", session_id)
    return Response(status_code=204)
