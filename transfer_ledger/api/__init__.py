"""
Transfer Ledger API Application Factory
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from .transfers import router as transfers_router
from .clients import router as clients_router
from .companies import router as companies_router
from .commission_rates import router as commission_rates_router
from .reports import router as reports_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Transfer Ledger API",
        description="Client transfer ledger with commissions and linked balances",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(transfers_router, prefix="/transfers", tags=["Transfers"])
    app.include_router(clients_router, prefix="/clients", tags=["Clients"])
    app.include_router(companies_router, prefix="/companies", tags=["Companies"])
    app.include_router(commission_rates_router, prefix="/commission-rates", tags=["Commission Rates"])
    app.include_router(reports_router, prefix="/reports", tags=["Reports"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "transfer_ledger_api",
            "version": __version__
        }

    return app


app = create_app()


def run_server(host: str = "0.0.0.0", port: int = 8090, debug: bool = False):
    """Run the FastAPI server"""
    import uvicorn

    uvicorn.run(
        "transfer_ledger.api:app",
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )
