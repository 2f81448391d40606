"""FastAPI app with health, search, company lookup and dataset import endpoints."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from io import BytesIO

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from .companies import CompanyDTO, CompanyType, SearchType
from .config import settings
from .db import get_session
from .logging_config import setup_logging
from .parsers import DatasetParseError, parse_dataset
from .pipelines import companies as company_lookups
from .pipelines.ingest import IngestError, import_companies
from .pipelines.search import SearchError, SearchRequest, parse_query, search_companies
from .query_builder import SearchContext, describe_where
from .query_parser import to_search_filters

logger = logging.getLogger(__name__)


# Pydantic response models
class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: str | None = None


class ParsedQueryDTO(BaseModel):
    """Parsed query data transfer object."""
    entity_types: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    products: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    employee_size: str | None = None
    min_year_established: int | None = None
    intent: str = "search"
    exporter: bool = False
    source: str = "rules"


class SearchFiltersDTO(BaseModel):
    """Database-facing filters."""
    keywords: list[str] = Field(default_factory=list)
    entity_type: str | None = None
    location: str | None = None
    certifications: list[str] = Field(default_factory=list)
    exporter: bool = False


class SearchResponse(BaseModel):
    """Paginated search response."""
    companies: list[CompanyDTO]
    total: int
    has_more: bool
    skip: int
    take: int
    parsed_query: ParsedQueryDTO | None = None
    filters: SearchFiltersDTO | None = None


class ParseRequest(BaseModel):
    """Query parse request."""
    query: str = Field(min_length=1, max_length=500)
    use_ai: bool = False


class ParseResponse(BaseModel):
    """Query parse response with the WHERE clause it would run."""
    query: str
    parsed_query: ParsedQueryDTO
    filters: SearchFiltersDTO
    where: list[dict]


class ImportResponse(BaseModel):
    """Dataset import response."""
    status: str
    filename: str
    rows: int
    inserted: int
    message: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    # Startup
    setup_logging()
    logger.info("Application starting up")

    yield

    # Shutdown
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Natural-language company search for the nutraceutical directory",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:3001"],  # Frontend URLs
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(DatasetParseError)
async def dataset_parse_error_handler(request, exc: DatasetParseError):
    """Handle dataset parsing errors."""
    logger.error(f"Dataset parse error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error="parse_error",
            detail=str(exc),
        ).model_dump(),
    )


@app.exception_handler(IngestError)
async def ingest_error_handler(request, exc: IngestError):
    """Handle dataset import errors."""
    logger.error(f"Ingest error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="ingest_error",
            detail=str(exc),
        ).model_dump(),
    )


@app.exception_handler(SearchError)
async def search_error_handler(request, exc: SearchError):
    """Handle search pipeline errors."""
    logger.error(f"Search error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="search_error",
            detail=str(exc),
        ).model_dump(),
    )


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        version=settings.version,
    )


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.version,
        "endpoints": {
            "health": "/health",
            "search": "/search",
            "parse_query": "/search/parse",
            "company": "/companies/{company_id}",
            "company_by_slug": "/companies/slug/{slug}",
            "similar_companies": "/companies/{company_id}/similar",
            "featured": "/companies/featured",
            "trending": "/companies/trending",
            "cities": "/companies/cities",
            "count": "/companies/count",
            "import": "/companies/import",
            "docs": "/docs",
        },
    }


@app.get("/search", response_model=SearchResponse)
async def search(
    q: str | None = Query(default=None, max_length=500, description="Free-text query"),
    type: list[SearchType] = Query(default=[]),
    city: list[str] = Query(default=[]),
    state: list[str] = Query(default=[]),
    verified: bool = False,
    skip: int = Query(default=0, ge=0),
    take: int | None = Query(default=None, ge=1),
    use_ai: bool = True,
    session: AsyncSession = Depends(get_session),
) -> SearchResponse:
    """Search companies with a natural-language query.

    This endpoint:
    1. Parses the query into keywords, entity type, location, certifications
    2. Combines them with the explicit filters into one WHERE clause
    3. Returns one page ranked by relevance

    Args:
        q: Free-text query, e.g. "ashwagandha exporters in gujarat"
        type: Explicit company types or "exporter" (overrides the type implied by q)
        city: Explicit cities
        state: Explicit states
        verified: Only GST-verified companies
        skip: Page offset
        take: Page size (capped by SEARCH_MAX_TAKE)
        use_ai: Allow AI query parsing when configured
        session: Database session (injected)

    Returns:
        SearchResponse with the ranked page and parse details
    """
    request = SearchRequest(
        query=q,
        context=SearchContext(
            types=[t.value for t in type],
            cities=city,
            states=state,
            verified=verified,
        ),
        skip=skip,
        take=take,
        use_ai=use_ai,
    )

    try:
        page = await search_companies(session, request)
    except SearchError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error searching {q!r}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}",
        )

    return SearchResponse(
        companies=page.companies,
        total=page.total,
        has_more=page.has_more,
        skip=page.skip,
        take=page.take,
        parsed_query=ParsedQueryDTO(**page.parsed_query.to_dict()) if page.parsed_query else None,
        filters=SearchFiltersDTO(**asdict(page.filters)) if page.filters else None,
    )


@app.post("/search/parse", response_model=ParseResponse)
async def parse_search(request: ParseRequest) -> ParseResponse:
    """Show how a query is read and which WHERE clause it produces."""
    parsed = await parse_query(request.query, use_ai=request.use_ai)
    filters = to_search_filters(parsed)

    return ParseResponse(
        query=request.query,
        parsed_query=ParsedQueryDTO(**parsed.to_dict()),
        filters=SearchFiltersDTO(**asdict(filters)),
        where=describe_where(filters),
    )


@app.get("/companies/count")
async def company_count(session: AsyncSession = Depends(get_session)) -> dict:
    """Total number of companies in the directory."""
    return {"count": await company_lookups.get_company_count(session)}


@app.get("/companies/cities", response_model=list[str])
async def company_cities(session: AsyncSession = Depends(get_session)) -> list[str]:
    """Distinct cities for the search filter sidebar."""
    return await company_lookups.get_unique_cities(session)


@app.get("/companies/featured", response_model=list[CompanyDTO])
async def featured_companies(
    limit: int = Query(default=8, ge=1, le=50),
    session: AsyncSession = Depends(get_session),
) -> list[CompanyDTO]:
    """Companies with complete profiles for the landing page."""
    return await company_lookups.get_featured_companies(session, limit=limit)


@app.get("/companies/trending", response_model=list[CompanyDTO])
async def trending_companies(
    type: list[CompanyType] = Query(default=[]),
    limit: int = Query(default=4, ge=1, le=50),
    session: AsyncSession = Depends(get_session),
) -> list[CompanyDTO]:
    """Newest companies of the requested types (all types if none given)."""
    types = [t.value for t in type] or [t.value for t in CompanyType]
    return await company_lookups.get_trending_companies(session, types, limit=limit)


@app.get("/companies/slug/{slug}", response_model=CompanyDTO)
async def company_by_slug(
    slug: str,
    session: AsyncSession = Depends(get_session),
) -> CompanyDTO:
    """Retrieve a company by its URL slug."""
    company = await company_lookups.get_company_by_slug(session, slug)
    if company is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Company not found: {slug}",
        )
    return company


@app.get("/companies/{company_id}", response_model=CompanyDTO)
async def company_by_id(
    company_id: int,
    session: AsyncSession = Depends(get_session),
) -> CompanyDTO:
    """Retrieve a company by id."""
    company = await company_lookups.get_company_by_id(session, company_id)
    if company is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Company {company_id} not found",
        )
    return company


@app.get("/companies/{company_id}/similar", response_model=list[CompanyDTO])
async def similar_companies(
    company_id: int,
    limit: int = Query(default=4, ge=1, le=20),
    session: AsyncSession = Depends(get_session),
) -> list[CompanyDTO]:
    """Companies sharing a category or type with the given company."""
    return await company_lookups.get_similar_companies(session, company_id, limit=limit)


@app.post(
    "/companies/import",
    response_model=ImportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def import_dataset(
    file: UploadFile = File(..., description="Directory dataset (CSV or Excel)"),
    session: AsyncSession = Depends(get_session),
) -> ImportResponse:
    """Import companies from a dataset export.

    Args:
        file: Uploaded dataset file
        session: Database session (injected)

    Returns:
        ImportResponse with row and insert counts
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Filename is required",
        )

    logger.info(f"Received dataset upload: {file.filename}")

    try:
        content = await file.read()
        records = parse_dataset(BytesIO(content), file.filename)
        inserted = await import_companies(session, records)
        await session.commit()
    except (DatasetParseError, IngestError):
        await session.rollback()
        raise
    except Exception as e:
        await session.rollback()
        logger.error(f"Unexpected error importing {file.filename}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Internal server error: {str(e)}",
        )
    finally:
        await file.close()

    return ImportResponse(
        status="success",
        filename=file.filename,
        rows=len(records),
        inserted=inserted,
        message=f"Imported {inserted} companies from {file.filename}",
    )
