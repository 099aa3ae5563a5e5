from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api import finance, health
from app.core.errors import FinanceError
from app.core.logging import configure_logging
from app.core.settings import get_settings


async def finance_error_handler(request: Request, exc: FinanceError) -> JSONResponse:
    # Reached when a dependency fails before the endpoint body runs.
    return JSONResponse(status_code=exc.code, content={"error": exc.message})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(title=settings.app_name)
    app.add_exception_handler(FinanceError, finance_error_handler)

    app.include_router(finance.router, prefix="/api")

    app.include_router(health.router)

    return app


app = create_app()
