from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth.router import router as auth_router
from .auth.security import PasswordBook
from .config import settings
from .db import init_db
from .logging import RequestIdMiddleware, setup_logging
from .routes.assignments import router as assignments_router
from .routes.contracts import router as contracts_router
from .routes.files import router as files_router
from .routes.notifications import router as notifications_router
from .routes.reviews import router as reviews_router
from .routes.setup import router as setup_router
from .routes.tickets import router as tickets_router
from .routes.timesheets import router as timesheets_router
from .routes.users import router as users_router
from .store.app_store import AppStore
from .store.data_sources import FixtureDataSource


log = structlog.get_logger(__name__)


def _message_from_validation(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{where}: {first.get('msg')}" if where else str(first.get("msg"))


def create_app(store: Optional[AppStore] = None) -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)

    if settings.auto_create_db:
        init_db()

    # Server-side store: collections only, the principal is scoped per request
    if store is None:
        store = AppStore(FixtureDataSource())
        store.bootstrap()
    app.state.store = store
    app.state.passwords = PasswordBook(settings.seed_password)
    app.state.revoked_tokens = set()

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Every error body is {"message": ...}
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Something went wrong"
        return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content={"message": _message_from_validation(exc)})

    # Routers
    for router in (
        auth_router,
        users_router,
        tickets_router,
        timesheets_router,
        reviews_router,
        setup_router,
        contracts_router,
        assignments_router,
        notifications_router,
        files_router,
    ):
        app.include_router(router, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # Metrics
    if settings.enable_metrics:
        from prometheus_fastapi_instrumentator import Instrumentator

        Instrumentator().instrument(app).expose(app)

    log.info("app_created", environment=settings.environment, users=len(store.users))
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("helpdesk.main:app", host=settings.host, port=settings.port)
