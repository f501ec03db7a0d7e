"""Router aggregation: every feature router is mounted under ``/api``."""

from fastapi import FastAPI

from welth.api import accounts, dashboard, maintenance, recurring, transactions


def register_routers(app: FastAPI) -> None:
    """Attach all API routes to the FastAPI application."""

    app.include_router(accounts.router, prefix="/api")
    app.include_router(transactions.router, prefix="/api")
    app.include_router(dashboard.router, prefix="/api")
    app.include_router(recurring.router, prefix="/api")
    app.include_router(maintenance.router, prefix="/api")
