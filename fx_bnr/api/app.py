"""FastAPI application exposing configuration, on-demand fetch and analytics."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from fx_bnr import FxBnr, __version__
from fx_bnr.api.auth import Authenticator, require_token
from fx_bnr.api.schemas import (
    ConfigureRequest,
    LoginRequest,
    MessageResponse,
    ObservationRow,
    TokenResponse,
)
from fx_bnr.errors import FxBnrError
from fx_bnr.settings import Settings, get_settings
from fx_bnr.utils.dates import parse_date
from fx_bnr.utils.logger import get_logger

LOGGER = get_logger(__name__)


def get_fx(request: Request) -> FxBnr:
    return request.app.state.fx


def create_app(
    fx: FxBnr | None = None,
    *,
    settings: Settings | None = None,
    start_scheduler: bool | None = None,
) -> FastAPI:
    """Build the HTTP app around an :class:`FxBnr` facade.

    The scheduled tick starts with the app unless ``start_scheduler`` (or the
    ``FX_BNR_SCHEDULER_ENABLED`` setting) says otherwise.
    """

    settings = settings or get_settings()
    fx = fx or FxBnr(settings=settings)
    run_scheduler = settings.scheduler_enabled if start_scheduler is None else start_scheduler

    app = FastAPI(
        title="fx-bnr",
        description="Ingests BNR reference rates and exports a configured snapshot",
        version=__version__,
    )
    app.state.fx = fx
    app.state.authenticator = Authenticator.from_settings(settings)
    app.state.scheduler = fx.scheduler()

    @app.on_event("startup")
    def startup_event() -> None:
        if run_scheduler:
            app.state.scheduler.start()
        else:
            LOGGER.info("Scheduler disabled; only on-demand requests will ingest")

    @app.on_event("shutdown")
    def shutdown_event() -> None:
        app.state.scheduler.shutdown()

    @app.exception_handler(FxBnrError)
    async def fx_error_handler(request: Request, exc: FxBnrError) -> JSONResponse:
        LOGGER.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    def configure(body: ConfigureRequest, fx: FxBnr = Depends(get_fx)) -> MessageResponse:
        fx.configure(body.currencies)
        return MessageResponse(message="Currencies configured successfully")

    app.add_api_route(
        "/currencies/configure",
        configure,
        methods=["POST"],
        response_model=MessageResponse,
    )
    # path used by earlier clients
    app.add_api_route(
        "/configure-currencies",
        configure,
        methods=["POST"],
        response_model=MessageResponse,
        include_in_schema=False,
    )

    @app.get("/currencies/{rate_date}", response_model=None)
    def currencies_for_date(rate_date: str, fx: FxBnr = Depends(get_fx)) -> Any:
        try:
            requested = parse_date(rate_date)
        except ValueError:
            return JSONResponse(
                status_code=400,
                content={"error": f"Invalid date {rate_date!r}; expected YYYY-MM-DD"},
            )
        return fx.rate(requested)

    @app.get("/analytics", response_model=List[ObservationRow])
    def analytics(
        _claims: Dict[str, Any] = Depends(require_token),
        fx: FxBnr = Depends(get_fx),
    ) -> List[Dict[str, str]]:
        return [row.as_dict() for row in fx.history()]

    @app.post("/login", response_model=None)
    def login(body: LoginRequest, request: Request) -> Any:
        authenticator: Authenticator = request.app.state.authenticator
        if not authenticator.verify(body.username, body.password):
            return JSONResponse(status_code=401, content={"error": "Invalid username or password"})
        return TokenResponse(token=authenticator.issue_token(body.username))

    @app.get("/health")
    def health(request: Request, fx: FxBnr = Depends(get_fx)) -> Dict[str, Any]:
        return {
            "status": "ok",
            "version": __version__,
            "scheduler_running": request.app.state.scheduler.running,
            "ticks": fx.pipeline.stats.as_dict(),
        }

    return app


__all__ = ["create_app", "get_fx"]
