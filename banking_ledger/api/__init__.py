"""
Banking Ledger API Application Factory

HTTP surface over LedgerStore for the dashboard. Every route is scoped to
a user; ledger errors map to HTTP status codes in dependencies.py.
"""

from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..store import LedgerStore, create_store
from .accounts import router as accounts_router
from .cards import router as cards_router
from .transfers import router as transfers_router


def create_app(store: Optional[LedgerStore] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Banking Ledger API",
        description="Per-user account ledger and transaction engine",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.store = store or create_store()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(accounts_router, prefix="/users/{user_id}", tags=["Accounts"])
    app.include_router(transfers_router, prefix="/users/{user_id}", tags=["Transfers"])
    app.include_router(cards_router, prefix="/users/{user_id}", tags=["Cards & Budget"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "banking_ledger_api",
            "version": __version__
        }

    return app


def run_server(host: str = "0.0.0.0", port: int = 8090, debug: bool = False):
    """Run the FastAPI server"""
    uvicorn.run(
        "banking_ledger.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )
