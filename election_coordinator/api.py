"""
FastAPI application exposing the election coordinator over HTTP.

Routes map one-to-one onto coordinator operations:
    GET  /candidates  -> list_candidates
    POST /candidates  -> add_candidate
    POST /voters      -> register_voter
    POST /vote        -> cast_vote
    GET  /results     -> get_results
    POST /end         -> end_election
"""
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import settings
from .coordinator import ElectionCoordinator
from .models import ElectionPhase, FailureKind, OperationResult
from .schemas import (
    CandidateOut,
    CandidateRequest,
    ErrorResponse,
    HealthResponse,
    OperationResponse,
    TurnoutResponse,
    VoteRequest,
    VoterRequest,
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Prometheus metrics
request_duration = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status"]
)
request_errors = Counter(
    "http_request_errors_total",
    "Total number of failed HTTP requests",
    ["error_type"]
)
election_open = Gauge(
    "election_open",
    "1 while the served election accepts mutations, 0 once closed"
)

# Stable failure kind -> HTTP status mapping
FAILURE_STATUS: Dict[FailureKind, int] = {
    FailureKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    FailureKind.UNKNOWN_CANDIDATE: status.HTTP_404_NOT_FOUND,
    FailureKind.UNKNOWN_VOTER: status.HTTP_404_NOT_FOUND,
    FailureKind.DUPLICATE_CANDIDATE: status.HTTP_409_CONFLICT,
    FailureKind.DUPLICATE_VOTER: status.HTTP_409_CONFLICT,
    FailureKind.ALREADY_VOTED: status.HTTP_409_CONFLICT,
    FailureKind.ALREADY_CLOSED: status.HTTP_409_CONFLICT,
    FailureKind.ELECTION_CLOSED: status.HTTP_403_FORBIDDEN,
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    403: {"model": ErrorResponse, "description": "Election is closed"},
    404: {"model": ErrorResponse, "description": "Unknown candidate or voter"},
    409: {"model": ErrorResponse, "description": "Conflict with current election state"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}

# Rate limiter
limiter = Limiter(key_func=get_remote_address)

router = APIRouter()


def get_coordinator(request: Request) -> ElectionCoordinator:
    """Coordinator owned by the running application."""
    return request.app.state.coordinator


def failure_response(result: OperationResult) -> JSONResponse:
    """Translate a rejected operation into its HTTP error response."""
    request_errors.labels(error_type=result.code).inc()
    body = ErrorResponse(error=result.code, message=result.message, details=result.details)
    return JSONResponse(
        status_code=FAILURE_STATUS[result.failure],
        content=body.model_dump(mode="json")
    )


def internal_error(operation: str, error: Exception) -> JSONResponse:
    request_errors.labels(error_type="internal_error").inc()
    logger.error(f"Error in {operation}: {error}", exc_info=True)
    body = ErrorResponse(error="internal_error", message="Internal server error")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json")
    )


@router.get("/candidates", response_model=list[CandidateOut])
def list_candidates(coordinator: ElectionCoordinator = Depends(get_coordinator)):
    """List all candidates in registration order."""
    return [candidate.to_dict() for candidate in coordinator.list_candidates()]


@router.post("/candidates", response_model=OperationResponse, responses=ERROR_RESPONSES)
@limiter.limit(settings.RATE_LIMIT)
def add_candidate(
    request: Request,
    candidate: CandidateRequest,
    coordinator: ElectionCoordinator = Depends(get_coordinator)
):
    """
    Add a candidate.

    - **id**: Unique candidate identifier
    - **name**: Candidate display name
    """
    try:
        result = coordinator.add_candidate(candidate.id, candidate.name)
    except Exception as e:
        return internal_error("add_candidate", e)

    if not result.ok:
        return failure_response(result)

    return OperationResponse(
        message="Candidate added successfully",
        data=result.value.to_dict()
    )


@router.post("/voters", response_model=OperationResponse, responses=ERROR_RESPONSES)
@limiter.limit(settings.RATE_LIMIT)
def register_voter(
    request: Request,
    voter: VoterRequest,
    coordinator: ElectionCoordinator = Depends(get_coordinator)
):
    """
    Register a voter.

    - **id**: Opaque voter token
    """
    try:
        result = coordinator.register_voter(voter.id)
    except Exception as e:
        return internal_error("register_voter", e)

    if not result.ok:
        return failure_response(result)

    return OperationResponse(
        message="Voter registered successfully",
        data=result.value.to_dict()
    )


@router.post("/vote", response_model=OperationResponse, responses=ERROR_RESPONSES)
@limiter.limit(settings.RATE_LIMIT)
def cast_vote(
    request: Request,
    vote: VoteRequest,
    coordinator: ElectionCoordinator = Depends(get_coordinator)
):
    """
    Cast a vote.

    - **voter_id**: Registered voter token
    - **candidate_id**: Candidate identifier

    Each registered voter can vote exactly once.
    """
    try:
        result = coordinator.cast_vote(vote.voter_id, vote.candidate_id)
    except Exception as e:
        return internal_error("cast_vote", e)

    if not result.ok:
        return failure_response(result)

    return OperationResponse(message=result.message)


@router.get("/results", response_model=Dict[str, int])
def get_results(coordinator: ElectionCoordinator = Depends(get_coordinator)):
    """Current vote count per candidate id."""
    return dict(coordinator.get_results())


@router.get("/turnout", response_model=TurnoutResponse)
def get_turnout(coordinator: ElectionCoordinator = Depends(get_coordinator)):
    """Registered voters, voters who voted and total votes."""
    return coordinator.get_turnout().to_dict()


@router.post("/end", response_model=OperationResponse, responses=ERROR_RESPONSES)
def end_election(coordinator: ElectionCoordinator = Depends(get_coordinator)):
    """Close the election. Fails with 409 if it is already closed."""
    try:
        result = coordinator.end_election()
    except Exception as e:
        return internal_error("end_election", e)

    if not result.ok:
        return failure_response(result)
    return OperationResponse(message=result.message)


@router.get("/health", response_model=HealthResponse)
def health_check(coordinator: ElectionCoordinator = Depends(get_coordinator)):
    """Service health and current election phase."""
    return HealthResponse(status="healthy", phase=coordinator.phase.value)


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.API_VERSION,
        "status": "running",
        "endpoints": {
            "list_candidates": "GET /candidates",
            "add_candidate": "POST /candidates",
            "register_voter": "POST /voters",
            "cast_vote": "POST /vote",
            "get_results": "GET /results",
            "get_turnout": "GET /turnout",
            "end_election": "POST /end",
            "health": "GET /health",
            "metrics": "GET /metrics"
        }
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info(f"Starting {settings.SERVICE_NAME} service...")

    yield

    turnout = app.state.coordinator.get_turnout()
    logger.info(
        f"Shutting down {settings.SERVICE_NAME}: phase={turnout.phase.value}, "
        f"registered={turnout.registered_voters}, votes={turnout.total_votes}"
    )


def create_app(coordinator: Optional[ElectionCoordinator] = None) -> FastAPI:
    """
    Build the HTTP application around one election.

    Args:
        coordinator: Election to serve (a fresh one if omitted)

    Returns:
        FastAPI: Configured application
    """
    app = FastAPI(
        title="Election Coordinator API",
        description="API for registering candidates and voters, casting votes and reading results",
        version=settings.API_VERSION,
        lifespan=lifespan
    )
    served = coordinator or ElectionCoordinator()
    app.state.coordinator = served
    election_open.set_function(lambda: 1 if served.phase is ElectionPhase.OPEN else 0)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    # Add rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.middleware("http")
    async def timing_middleware(request: Request, call_next):
        """
        Bound request time and record its duration.

        Coordinator routes run in the threadpool, so a handler waiting on
        the election lock can be abandoned here. An abandoned operation may
        still complete atomically once the lock frees; a 503 means the
        outcome is unknown and the caller re-reads state.
        """
        start_time = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                call_next(request),
                timeout=settings.REQUEST_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            request_errors.labels(error_type="timeout").inc()
            logger.warning(f"Request timed out: {request.method} {request.url.path}")
            body = ErrorResponse(error="timeout", message="Request timed out")
            response = JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=body.model_dump(mode="json")
            )

        request_duration.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).observe(time.perf_counter() - start_time)

        return response

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "election_coordinator.api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
