"""FastAPI application serving the client records API."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Sequence

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from clientfinder.config import AppConfig
from clientfinder.errors import ClientFinderError, MissingQueryParameter
from clientfinder.index.search import Searcher
from clientfinder.index.store import StoreHolder
from clientfinder.models import Record
from clientfinder.utils.pagination import page_index_from_number, paginate
from clientfinder.web.throttle import RequestThrottle

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE = 1
THROTTLED_PREFIXES = ("/api", "/swagger.json")


class ClientsPage(BaseModel):
    page: int
    per_page: int
    total: int
    clients: List[Dict[str, Any]]


class DuplicatesPage(BaseModel):
    page: int
    per_page: int
    total: int
    duplicates: List[Dict[str, Any]]


class SearchPage(BaseModel):
    page: int
    per_page: int
    total: int
    results: List[Dict[str, Any]]


class RefreshResult(BaseModel):
    status: str
    total: int
    detail: str = ""


@dataclass(slots=True)
class Pagination:
    page: int
    per_page: int


def pagination(
    request: Request,
    page: int = Query(DEFAULT_PAGE, ge=1),
    per_page: int | None = Query(None, ge=1),
) -> Pagination:
    if per_page is None:
        per_page = request.app.state.config.per_page
    return Pagination(page=page, per_page=per_page)


def _holder(request: Request) -> StoreHolder:
    return request.app.state.holder


def _page_of(records: Sequence[Record], params: Pagination) -> List[Dict[str, Any]]:
    page = paginate(records, page_index_from_number(params.page), params.per_page)
    return [record.to_dict() for record in page.items]


router = APIRouter(prefix="/api")


@router.get("/keys", response_model=List[str])
async def list_keys(request: Request) -> List[str]:
    """All field names available for searching."""
    return list(_holder(request).current.field_names)


@router.get("/list", response_model=ClientsPage)
async def list_clients(request: Request, params: Pagination = Depends(pagination)) -> ClientsPage:
    records = _holder(request).current.records
    return ClientsPage(
        page=params.page,
        per_page=params.per_page,
        total=len(records),
        clients=_page_of(records, params),
    )


@router.get("/duplicates", response_model=DuplicatesPage)
async def list_duplicates(
    request: Request, params: Pagination = Depends(pagination)
) -> DuplicatesPage:
    """Clients sharing an email address with another client."""
    duplicates = Searcher(_holder(request).current).duplicate_emails()
    return DuplicatesPage(
        page=params.page,
        per_page=params.per_page,
        total=len(duplicates),
        duplicates=_page_of(duplicates, params),
    )


@router.get("/search", response_model=SearchPage)
async def search_clients(
    request: Request,
    field: str | None = None,
    query: str | None = None,
    params: Pagination = Depends(pagination),
) -> SearchPage:
    """Case-insensitive partial match of ``query`` against ``field``."""
    if field is None or query is None:
        raise MissingQueryParameter()

    results = Searcher(_holder(request).current).search_by_field(field, query)
    return SearchPage(
        page=params.page,
        per_page=params.per_page,
        total=len(results),
        results=_page_of(results, params),
    )


@router.post("/refresh", response_model=RefreshResult)
async def refresh_clients(request: Request) -> RefreshResult:
    """Reload the data file; requests already running keep the previous snapshot."""
    holder = _holder(request)
    outcome = await asyncio.to_thread(holder.refresh)
    return RefreshResult(
        status=outcome.kind.value,
        total=len(holder.current),
        detail=outcome.detail,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    yield


def register_error_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": message}``."""

    @app.exception_handler(ClientFinderError)
    async def clientfinder_error_handler(request: Request, exc: ClientFinderError) -> JSONResponse:
        LOGGER.warning("%s on %s", exc.message, request.url.path)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        names = ", ".join(str(error["loc"][-1]) for error in exc.errors())
        LOGGER.warning("Validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=400, content={"error": f"Invalid query parameter: {names}"}
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )


def create_app(config: AppConfig | None = None, holder: StoreHolder | None = None) -> FastAPI:
    """Build the API around ``holder``, loading ``config.data_path`` if none is given."""
    config = config or AppConfig()
    if holder is None:
        holder = StoreHolder(config.resolve_data_path(Path.cwd()))

    app = FastAPI(
        title="ClientFinder API",
        version="0.1.0",
        docs_url="/",
        openapi_url="/swagger.json",
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.holder = holder
    app.state.throttle = RequestThrottle(config.request_limit, config.throttle_window)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def throttle_requests(request: Request, call_next):
        if request.url.path.startswith(THROTTLED_PREFIXES):
            client_ip = request.client.host if request.client else "unknown"
            if not request.app.state.throttle.allow(client_ip):
                LOGGER.info("Throttled %s on %s", client_ip, request.url.path)
                return JSONResponse(status_code=429, content={"error": "Too Many Requests"})
        return await call_next(request)

    register_error_handlers(app)
    app.include_router(router)
    return app
