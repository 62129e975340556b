# helpdesk/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from helpdesk.core.config import Settings, get_settings
from helpdesk.core.errors import TicketError
from helpdesk.core.logging import RequestLoggingMiddleware, configure_logging
from helpdesk.ticket.routes import router as ticket_router
from helpdesk.ticket.store import TicketStore, build_store

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def create_app(settings: Settings | None = None, store: TicketStore | None = None) -> FastAPI:
    """Build the API around ``store``; when omitted, the configured backend is constructed."""
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    ticket_store = store or build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.ticket_store.close()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESC,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.ticket_store = ticket_store

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TicketError)
    async def ticket_error_handler(request: Request, exc: TicketError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'][1:]) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        return _error_response(400, f"Invalid request: {problems}")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"{request.method} {request.url.path} failed unexpectedly", exc_info=exc)
        return _error_response(500, "Internal server error")

    # Routers
    app.include_router(ticket_router)

    @app.get("/health", tags=["Health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
