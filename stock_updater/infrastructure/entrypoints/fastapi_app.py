"""
FastAPI entry point: triggers update pipelines over HTTP.

create_app() receives already-wired collaborators so tests can inject fakes;
build_app() is the Composition Root used by uvicorn.

Run locally:
    uvicorn stock_updater.infrastructure.entrypoints.fastapi_app:build_app --factory --port 8000
"""

from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from stock_updater.application.services.pipeline_orchestrator import PipelineOrchestrator
from stock_updater.domain.entities.fetch_config import ALL_PIPELINES, PipelineKind, SweepProfile
from stock_updater.domain.entities.pipeline_report import PipelineState
from stock_updater.domain.errors import PersistenceFailure
from stock_updater.domain.ports.repository_port import IStockRepository


class StockOut(BaseModel):
    symbol: str
    name: Optional[str] = None
    options_offered: str


class RefreshRequest(BaseModel):
    options_offered: Optional[str] = None
    pipelines: list[PipelineKind] = list(ALL_PIPELINES)


def create_app(
    orchestrator: PipelineOrchestrator,
    stock_repository: IStockRepository,
    profile: SweepProfile,
    options_indicator: str = "Y",
    on_close: Optional[Callable[[], None]] = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if on_close is not None:
            on_close()

    app = FastAPI(title="Stock Details Updater API", lifespan=lifespan)

    def run_pipeline(symbol: str, kind: PipelineKind) -> dict:
        symbol = symbol.upper().strip()
        report = orchestrator.run_unit(symbol, kind, profile)
        if report.state is PipelineState.FAILED:
            raise HTTPException(status_code=502, detail=report.as_dict())
        return report.as_dict()

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/stocks", response_model=list[StockOut])
    def list_stocks(options_offered: str = Query(default=options_indicator)):
        try:
            stocks = stock_repository.find_by_options_offered(options_offered)
        except PersistenceFailure as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return [
            StockOut(symbol=s.symbol, name=s.name, options_offered=s.options_offered)
            for s in stocks
        ]

    @app.post("/stocks/{symbol}/details")
    def update_details(symbol: str):
        """Fetch stats + quote for *symbol*, merge them and upsert the details row."""
        return run_pipeline(symbol, PipelineKind.DETAILS)

    @app.post("/stocks/{symbol}/moving-average")
    def update_moving_average(symbol: str):
        return run_pipeline(symbol, PipelineKind.MOVING_AVERAGE)

    @app.post("/stocks/{symbol}/historical-prices")
    def update_historical_prices(symbol: str):
        return run_pipeline(symbol, PipelineKind.HISTORICAL_PRICES)

    @app.post("/refresh")
    def refresh(body: Optional[RefreshRequest] = None):
        """Sweep every optionable stock; failed units are listed, not raised."""
        body = body or RefreshRequest()
        try:
            report = orchestrator.sweep_optionable(
                stock_repository,
                profile,
                body.options_offered or options_indicator,
                body.pipelines,
            )
        except PersistenceFailure as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return {
            "done": len(report.succeeded),
            "failed": len(report.failed),
            "reports": [r.as_dict() for r in report.reports],
        }

    return app


def build_app() -> FastAPI:
    from stock_updater.infrastructure.config.settings import Settings
    from stock_updater.infrastructure.entrypoints.composition import build_components
    from stock_updater.infrastructure.logging_config import setup_logger

    settings = Settings.from_env()
    setup_logger("stock_updater", level=settings.log_level, log_dir=settings.log_dir)
    components = build_components(settings)
    return create_app(
        components.orchestrator,
        components.stock_repository,
        settings.profile(),
        options_indicator=settings.options_indicator,
        on_close=components.close,
    )
