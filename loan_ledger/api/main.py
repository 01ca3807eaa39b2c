"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from loan_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_ledger.api.v1 import alerts, esg, imports, loans, payments, portfolio
from loan_ledger.domain.exceptions import AlertNotFoundError, LoanNotFoundError, LoanValidationError
from loan_ledger.infrastructure.observability.logging import setup_logging
from loan_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def validation_error_handler(request: Request, exc: LoanValidationError) -> JSONResponse:
    """Structured rejection reasons, one entry per failing field"""
    return JSONResponse(
        status_code=422,
        content={"detail": [{"field": i.field, "message": i.message} for i in exc.issues]},
    )


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Ledger",
        description="Loan tracking, payment reconciliation and portfolio risk service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(LoanValidationError, validation_error_handler)
    app.add_exception_handler(LoanNotFoundError, not_found_handler)
    app.add_exception_handler(AlertNotFoundError, not_found_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(esg.router, prefix="/v1", tags=["esg"])
    app.include_router(portfolio.router, prefix="/v1", tags=["portfolio"])
    app.include_router(alerts.router, prefix="/v1", tags=["alerts"])
    app.include_router(imports.router, prefix="/v1", tags=["imports"])

    return app


app = create_app()
