"""
Composition Root shared by the CLI and the HTTP app.

Wires the httpx-backed provider adapters and the SQLAlchemy repositories to
the three update use cases and the PipelineOrchestrator.
"""

from dataclasses import dataclass

from stock_updater.application.services.pipeline_orchestrator import PipelineOrchestrator
from stock_updater.application.use_cases.update_historical_prices import UpdateHistoricalPricesUseCase
from stock_updater.application.use_cases.update_moving_average import UpdateMovingAverageUseCase
from stock_updater.application.use_cases.update_stock_details import UpdateStockDetailsUseCase
from stock_updater.domain.ports.repository_port import IStockRepository
from stock_updater.infrastructure.config.settings import Settings
from stock_updater.infrastructure.market_data.alpha_vantage_adapter import AlphaVantageTimeSeriesProvider
from stock_updater.infrastructure.market_data.http_client import JsonHttpClient
from stock_updater.infrastructure.market_data.iex_adapter import IEXStockDetailsProvider
from stock_updater.infrastructure.persistence.sqlalchemy_repository import (
    SqlAlchemyHistoricalPriceRepository,
    SqlAlchemyMovingAverageRepository,
    SqlAlchemyStockDetailsRepository,
    SqlAlchemyStockRepository,
    create_session_factory,
)


@dataclass
class Components:
    orchestrator: PipelineOrchestrator
    stock_repository: IStockRepository
    clients: tuple[JsonHttpClient, ...] = ()

    def close(self) -> None:
        for client in self.clients:
            client.close()


def build_components(settings: Settings) -> Components:
    iex_client = JsonHttpClient(settings.iex_base_url, timeout=settings.http_timeout)
    av_client = JsonHttpClient(settings.alphavantage_base_url, timeout=settings.http_timeout)
    details_provider = IEXStockDetailsProvider(iex_client, token=settings.iex_token)
    series_provider = AlphaVantageTimeSeriesProvider(av_client)

    session_factory = create_session_factory(settings.database_url)

    orchestrator = PipelineOrchestrator(
        details=UpdateStockDetailsUseCase(
            details_provider, SqlAlchemyStockDetailsRepository(session_factory)
        ),
        moving_average=UpdateMovingAverageUseCase(
            series_provider, SqlAlchemyMovingAverageRepository(session_factory)
        ),
        historical_prices=UpdateHistoricalPricesUseCase(
            series_provider, SqlAlchemyHistoricalPriceRepository(session_factory)
        ),
        max_workers=settings.sweep_max_workers,
    )
    return Components(
        orchestrator=orchestrator,
        stock_repository=SqlAlchemyStockRepository(session_factory),
        clients=(iex_client, av_client),
    )
