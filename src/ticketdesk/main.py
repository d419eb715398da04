"""
Ticketdesk - Main Application
=============================

Ticket lifecycle and SLA tracking for support tickets filed against
external suppliers (carriers, billing-system vendors, IT vendors).

Modules:
- Tickets: state machine, interaction timeline, SLA classification
- Suppliers: supplier registry and default SLA hours

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: Database, in-memory store, policy file
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ticketdesk.config import Settings, settings as default_settings
from ticketdesk.infrastructure.container import (
    ServiceContainer,
    build_database_services,
    build_memory_services,
)
from ticketdesk.infrastructure.database import (
    close_database,
    create_tables,
    get_session_maker,
    init_database,
)
from ticketdesk.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    global_exception_handler,
)
from ticketdesk.shared.infrastructure.logging import get_logger, setup_logging
from ticketdesk.suppliers.interfaces import suppliers_router
from ticketdesk.tickets.infrastructure import PolicyConfigManager
from ticketdesk.tickets.interfaces import tickets_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Load the ticket policy and watch it for changes
    3. Initialize the storage backend and wire the services

    SHUTDOWN:
    1. Stop the policy watcher
    2. Close database connections
    """
    settings: Settings = app.state.settings

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Ticketdesk", extra={
        "version": settings.app_version,
        "environment": settings.environment,
        "storage_backend": settings.storage_backend
    })

    policy_manager = PolicyConfigManager()
    policy_manager.load(settings.ticket_policy_path)
    if settings.watch_policy_file:
        policy_manager.start_watching()
    app.state.policy_manager = policy_manager

    uses_database = False
    if app.state.container is None:
        if settings.storage_backend == "memory":
            app.state.container = build_memory_services(policy_provider=policy_manager)
        else:
            logger.info("Initializing database")
            init_database(settings.database_url)
            uses_database = True
            # Tables are created for development; use migrations elsewhere
            try:
                await create_tables()
            except Exception as e:
                logger.warning("Database not available, running in degraded mode", extra={"error": str(e)})
            app.state.container = build_database_services(get_session_maker(), policy_provider=policy_manager)

    logger.info("Ticketdesk started", extra={"storage_backend": app.state.container.backend})

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Ticketdesk")
    policy_manager.stop_watching()
    if uses_database:
        await close_database()
    logger.info("Ticketdesk shutdown complete")


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    A prebuilt ``container`` skips storage setup at startup.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Ticketdesk API",
        description="""
        ## Supplier Ticket Lifecycle & SLA Tracking

        ### Tickets
        - `POST /tickets` - Open a ticket (deadline fixed at creation)
        - `POST /tickets/{id}/status` - Change status (audited)
        - `POST /tickets/{id}/interactions` - Add a timeline entry
        - `POST /tickets/{id}/duplicate` - Copy a ticket
        - `GET /tickets/{id}/sla` - SLA classification
        - `GET /tickets/summary` - Dashboard numbers

        ### Suppliers
        - `GET /suppliers?active_only=true` - Suppliers offered at intake
        - `POST /suppliers` - Register a supplier with its SLA hours

        Mutating calls take the caller from `X-Actor-Id`, `X-Actor-Name`
        and `X-Actor-Role`.
        """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.container = container

    # === CORS Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Added last so it runs first and LoggingMiddleware sees the id
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(tickets_router)
    app.include_router(suppliers_router)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint for load balancers and orchestrators."""
        container = request.app.state.container
        policy_manager = getattr(request.app.state, "policy_manager", None)
        return {
            "status": "healthy" if container else "starting",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": {
                "storage_backend": container.backend if container else "not_initialized",
                "ticket_policy": "loaded" if policy_manager else "default",
            }
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": "Ticketdesk",
            "version": settings.app_version,
            "architecture": "Clean Architecture / Modular Monolith",
            "docs": "/docs",
            "health": "/health",
            "modules": {
                "tickets": {"prefix": "/tickets"},
                "suppliers": {"prefix": "/suppliers"},
            }
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ticketdesk.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.environment == "development",
        log_level="info"
    )
