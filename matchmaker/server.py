"""
FastAPI server for the matchmaking service.

Exposes:
  - GET /health - Health check
  - POST /profile - Create or update the caller's profile
  - GET /profile - The caller's profile
  - GET /recommendations - Ranked candidate profiles
  - POST /swipes - Like or dislike a profile
  - GET /likes - Profiles the caller liked, flagged as mutual or not
  - GET /docs - Interactive API documentation (Swagger UI)

The API gateway authenticates users and forwards their id in X-User-Id.
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status, Header
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import (
    AfterValidator,
    AnyHttpUrl,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from typing import Any, Dict, List, Optional, Annotated, Union
import time
from contextlib import asynccontextmanager

# Import configuration (loads .env automatically)
from matchmaker.config import config, validate_config

# Import logging setup
from matchmaker.utils.logging_config import logger, setup_langsmith, setup_logging

from matchmaker.dependencies import Services, get_services
from matchmaker.tools.profile_tools import upsert_profile
from matchmaker.utils.errors import (
    InvalidInputError,
    NotFoundError,
    StoreUnavailableError,
)

# Setup logging
setup_logging(debug=config.DEBUG)
setup_langsmith()

# ============================================================
# VALIDATE CONFIGURATION AT STARTUP
# ============================================================
try:
    config_status = validate_config()
    logger.info("✅ Configuration validated successfully")
    for key, value in config_status.items():
        logger.info(f"  {key}: {value}")
except ValueError as e:
    logger.error(f"❌ Configuration error: {e}")
    exit(1)

# ============================================================
# FASTAPI APPLICATION
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log effective settings on startup; stop notification workers on shutdown."""
    logger.info(
        "🚀 Matchmaker starting: store=%s threshold=%s page_size=%s/%s debug=%s",
        config.STORE_BACKEND,
        config.POPULARITY_THRESHOLD,
        config.DEFAULT_PAGE_SIZE,
        config.MAX_PAGE_SIZE,
        config.DEBUG,
    )
    yield
    logger.info("🛑 Matchmaker shutting down")
    if get_services.cache_info().currsize:
        get_services().close()


app = FastAPI(
    lifespan=lifespan,
    title="Matchmaker Service",
    description="Proximity-ranked recommendations, swipes and mutual likes",
    version="1.0.0",
)

# ============================================================
# CORS CONFIGURATION
# ============================================================
origins = [
    "http://localhost:5173",  # Vite dev
    "http://localhost:3000",  # React/Next dev
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================
# REQUEST/RESPONSE MODELS
# ============================================================
_http_url = TypeAdapter(AnyHttpUrl)


def _check_http_url(value: str) -> str:
    """Validate as an http(s) URL but keep the caller's exact string."""
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError(f"{value!r} is not a valid http(s) URL") from None
    return value


PictureUrl = Annotated[str, AfterValidator(_check_http_url)]


class ProfileRequest(BaseModel):
    """
    Request body for POST /profile.

    Latitude and longitude are optional but must be sent together.
    """
    name: str = Field(min_length=1)
    age: int = Field(ge=18, le=120)
    pictures: List[PictureUrl] = Field(min_length=1, max_length=6)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    bio: Optional[str] = Field(default=None, max_length=255)
    city: Optional[str] = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def coordinates_together(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump()


class ProfileResponse(BaseModel):
    success: bool
    profile: Dict[str, Any]
    created: bool = False


class SwipeRequest(BaseModel):
    """
    Request body for POST /swipes.

    Attributes:
        profile_id: Target profile id.
        action: 'like' or 'dislike'.
    """
    profile_id: Union[str, int]
    action: str


class SwipeResponse(BaseModel):
    success: bool
    swipe: Dict[str, Any]
    notification_sent: bool = False


class PageResponse(BaseModel):
    """Paginated listing shared by /recommendations and /likes."""
    items: List[Dict[str, Any]]
    total: int
    page: int
    page_size: int


# ============================================================
# MIDDLEWARE
# ============================================================
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """
    Middleware to track request processing time.

    Adds X-Process-Time header to all responses showing how long request took.
    """
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


# ============================================================
# AUTHENTICATION
# ============================================================
async def get_actor_id(
    x_user_id: Annotated[Optional[str], Header()] = None,
    authorization: Annotated[Optional[str], Header()] = None,
) -> str:
    """
    Resolve the authenticated actor for this request.

    The gateway must send the user id in X-User-Id and, when SERVICE_TOKEN
    is configured, the shared secret as a Bearer token.
    """
    if config.SERVICE_TOKEN:
        expected = f"Bearer {config.SERVICE_TOKEN}"
        if authorization != expected:
            logger.warning("Unauthorized request: invalid or missing token")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Unauthorized",
            )

    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id


# ============================================================
# ROUTES
# ============================================================

@app.get("/health", tags=["System"])
async def health_check() -> Dict[str, str]:
    """
    Health check endpoint.

    Called by load balancers and monitoring systems.
    """
    return {"status": "healthy"}


@app.get("/", tags=["System"])
async def root() -> Dict[str, str]:
    """Information about the API and how to access documentation."""
    return {
        "service": "Matchmaker Service",
        "version": "1.0.0",
        "docs": f"http://localhost:{config.PORT}/docs",
        "health": f"http://localhost:{config.PORT}/health",
    }


@app.post(
    "/profile",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Profile"],
)
def upsert_own_profile(
    request: ProfileRequest,
    response: Response,
    actor_id: str = Depends(get_actor_id),
    services: Services = Depends(get_services),
) -> ProfileResponse:
    """Create the caller's profile (201), or update it in place (200)."""
    profile, created = upsert_profile(services.profiles, actor_id, request.to_fields())
    if not created:
        response.status_code = status.HTTP_200_OK
    return ProfileResponse(success=True, profile=profile, created=created)


@app.get("/profile", response_model=ProfileResponse, tags=["Profile"])
def get_own_profile(
    actor_id: str = Depends(get_actor_id),
    services: Services = Depends(get_services),
) -> ProfileResponse:
    profile = services.profiles.get_profile_by_owner(actor_id)
    if profile is None:
        raise NotFoundError(f"No profile for user {actor_id}")
    return ProfileResponse(success=True, profile=profile)


@app.get("/recommendations", response_model=PageResponse, tags=["Recommendations"])
def get_recommendations(
    lat: Optional[float] = Query(default=None, ge=-90, le=90),
    lng: Optional[float] = Query(default=None, ge=-180, le=180),
    age: Optional[int] = Query(default=None, ge=18, le=120),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    actor_id: str = Depends(get_actor_id),
    services: Services = Depends(get_services),
) -> PageResponse:
    """
    Candidate profiles sorted by distance (unknown locations last), then by
    age compatibility.

    lat/lng default to the caller's saved location; 422 if neither exists.
    """
    start_time = time.time()
    result = services.recommendation_graph.invoke(
        {
            "user_id": actor_id,
            "lat": lat,
            "lng": lng,
            "age": age,
            "page": page,
            "page_size": page_size,
        }
    )
    logger.info(
        "recommendations summary: user=%s total=%s time=%.3fs",
        actor_id,
        result["total"],
        time.time() - start_time,
    )
    return PageResponse(
        items=result["items"], total=result["total"], page=page, page_size=page_size
    )


@app.post(
    "/swipes",
    response_model=SwipeResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Interactions"],
)
def create_swipe(
    request: SwipeRequest,
    actor_id: str = Depends(get_actor_id),
    services: Services = Depends(get_services),
) -> SwipeResponse:
    """
    Record a like or dislike. A later swipe on the same profile replaces the
    earlier one.
    """
    result = services.swipe_graph.invoke(
        {
            "user_id": actor_id,
            "profile_id": str(request.profile_id),
            "action": request.action,
        }
    )
    return SwipeResponse(
        success=True,
        swipe=result["swipe"],
        notification_sent=result.get("notification_sent", False),
    )


@app.get("/likes", response_model=PageResponse, tags=["Matches"])
def list_likes(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    mutual_only: bool = Query(default=False),
    actor_id: str = Depends(get_actor_id),
    services: Services = Depends(get_services),
) -> PageResponse:
    """Profiles the caller liked, oldest like first, each with is_mutual."""
    result = services.likes_graph.invoke(
        {
            "user_id": actor_id,
            "page": page,
            "page_size": page_size,
            "mutual_only": mutual_only,
        }
    )
    return PageResponse(
        items=result["items"], total=result["total"], page=page, page_size=page_size
    )


# ============================================================
# ERROR HANDLERS
# ============================================================

def _error_response(status_code: int, error: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "status_code": status_code,
            "code": code,
        },
    )


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.warning(f"Rejected request: {exc}")
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc), exc.code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg', 'invalid input')}" if field else "Invalid input"
    logger.warning(f"Rejected request: {message}")
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, message, "validation_error")


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.info(f"Not found: {exc}")
    return _error_response(status.HTTP_404_NOT_FOUND, str(exc), exc.code)


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error(f"Store unavailable: {exc}")
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE, "Storage unavailable", "store_unavailable"
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Handle HTTP exceptions with consistent error response format.
    """
    logger.error(f"HTTP Exception: {exc.status_code} - {exc.detail}")
    return _error_response(exc.status_code, exc.detail, "http_error")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.

    Never returns the exception message to the client; use logging instead.
    """
    logger.error(f"Unhandled exception: {str(exc)}")
    logger.exception("Full traceback:")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "internal_error"
    )


# ============================================================
# ENTRY POINT
# ============================================================

if __name__ == "__main__":
    """
    Run with: python -m uvicorn matchmaker.server:app --reload
    """
    import uvicorn
    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level="info" if not config.DEBUG else "debug"
    )
