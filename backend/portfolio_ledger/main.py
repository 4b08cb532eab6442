"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from portfolio_ledger.config import settings
from portfolio_ledger.api.routes import ledger, reports
from portfolio_ledger.services.aggregator import LedgerAggregator
from portfolio_ledger.services.api_client import PortfolioApiClient
from portfolio_ledger.services.ledger_store import LedgerStoreRegistry
from portfolio_ledger.services.session_provider import SessionProvider
from portfolio_ledger.utils.logging_setup import configure_logging


def create_app(client: Optional[PortfolioApiClient] = None) -> FastAPI:
    """
    Build the application.

    Args:
        client: Portfolio API client; one is created from settings when omitted
    """
    client = client or PortfolioApiClient()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        yield
        await client.aclose()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="Merged transaction ledger across portfolios",
        lifespan=lifespan,
    )

    app.state.ledger_registry = LedgerStoreRegistry(
        session_provider=SessionProvider(client),
        aggregator=LedgerAggregator(client),
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(ledger.router, prefix=f"{settings.api_prefix}/ledger", tags=["ledger"])
    app.include_router(reports.router, prefix=f"{settings.api_prefix}/reports", tags=["reports"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "Portfolio Ledger API",
            "version": settings.api_version,
            "docs": "/docs"
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
