import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from salesdesk.app.api.v1.api import api_router
from salesdesk.app.core.config import settings
from salesdesk.app.core.exceptions import SalesError, UnexpectedStoreError, ValidationError
from salesdesk.app.middleware.request_id import RequestIDMiddleware

# Import all models so SQLAlchemy resolves relationships
import salesdesk.app.models.registry  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Salesdesk Sales Management API")

# ─── CORS: restrict to configured origins ────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(RequestIDMiddleware)


# ─── Error rendering ─────────────────────────────────────────────────────────


@app.exception_handler(SalesError)
async def sales_error_handler(request: Request, exc: SalesError) -> JSONResponse:
    body: dict[str, object] = {"message": exc.message}
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Unexpected store error on %s %s", request.method, request.url.path)
    error = UnexpectedStoreError()
    return JSONResponse(status_code=error.status_code, content={"message": error.message})


@app.get("/", include_in_schema=False)
def root() -> dict[str, str]:
    return {"message": "Sales Management Tool API"}


app.include_router(api_router)
