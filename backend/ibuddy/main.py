"""
FastAPI application entrypoint. Run with: uvicorn ibuddy.main:app --reload --port 8000

API base path: routes are mounted at root (no /api/v1 prefix).
  - Auth:    POST /auth/signup, POST /auth/signin, GET /auth/me, POST /auth/password
  - Users:   GET/POST /users, GET /users/roles, GET/PATCH/DELETE /users/{email}
  - Buddies: GET /buddies, GET /buddies/{email}
  - Mentees: GET/POST /mentees, GET/PATCH/DELETE /mentees/{id}, PUT /mentees/{id}/status,
             GET/POST /mentees/{id}/notes, PATCH/DELETE /mentees/{id}/notes/{note_id}
  - Assets:  GET /assets, POST /assets/files, POST /assets/email-templates,
             GET/PATCH/DELETE /assets/{id}, GET /assets/{id}/url, GET /assets/{id}/download
  - FAQs:    GET/POST /faqs, GET/PATCH/DELETE /faqs/{id}
  - Email:   POST /email/bulk, GET /email/templates, GET /email/templates/{id}

Errors: 400 {"errors": {field: message}}, 403/404/409/502 {"detail": message}.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ibuddy.api.assets import router as assets_router
from ibuddy.api.auth import router as auth_router
from ibuddy.api.buddies import router as buddies_router
from ibuddy.api.email import router as email_router
from ibuddy.api.faqs import router as faqs_router
from ibuddy.api.mentees import router as mentees_router
from ibuddy.api.users import router as users_router
from ibuddy.config import DEFAULT_SECRET_KEY, settings
from ibuddy.errors import AuthorizationDenied, ExternalServiceError, FormValidationError, InvalidStatusTransition

logger = logging.getLogger(__name__)

app = FastAPI(
    title="iBuddy API",
    description="Back office for the buddy program: users, mentees, notes, assets, FAQs and bulk email.",
    version="0.1.0",
)

_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(buddies_router)
app.include_router(mentees_router)
app.include_router(assets_router)
app.include_router(faqs_router)
app.include_router(email_router)

_REQUEST_LOCATIONS = ("body", "query", "path", "form", "header")


def validation_errors(errors: list[dict]) -> dict[str, str]:
    """pydantic errors -> {field: first message}, with pydantic's "Value error, " prefix removed."""
    out: dict[str, str] = {}
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in _REQUEST_LOCATIONS]
        field = loc[0] if loc else "__root__"
        msg = str(err.get("msg", "Invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        out.setdefault(field, msg)
    return out


@app.exception_handler(RequestValidationError)
def handle_request_validation(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": validation_errors(exc.errors())})


@app.exception_handler(FormValidationError)
def handle_form_validation(request: Request, exc: FormValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": exc.errors})


@app.exception_handler(AuthorizationDenied)
def handle_authorization_denied(request: Request, exc: AuthorizationDenied):
    logger.info("Forbidden %s %s: %s", request.method, request.url.path, exc.reason)
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": exc.reason})


@app.exception_handler(InvalidStatusTransition)
def handle_invalid_transition(request: Request, exc: InvalidStatusTransition):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(ExternalServiceError)
def handle_external_service(request: Request, exc: ExternalServiceError):
    logger.error("%s failed on %s %s: %s", exc.service, request.method, request.url.path, exc.message)
    detail = f"{exc.service} is unavailable, try again later"
    if settings.debug:
        detail = str(exc)
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": detail})


@app.on_event("startup")
def startup():
    """Create the store table and the bootstrap admin. Fail fast if production uses default SECRET_KEY."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if settings.is_production and (settings.secret_key or "").strip() == DEFAULT_SECRET_KEY:
        logger.critical("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
        raise RuntimeError("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
    logger.info("Assets: %s, email: %s", settings.asset_host, settings.email_backend)
    from ibuddy.database import init_db
    init_db()
    from ibuddy.repositories import UserRepository
    from ibuddy.services.bootstrap import ensure_bootstrap_admin
    from ibuddy.store import get_store
    ensure_bootstrap_admin(UserRepository(get_store()))


@app.get("/health")
def health():
    """Health check (JSON)."""
    return {"status": "ok", "message": "iBuddy API"}
