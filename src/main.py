"""
Semantic NLP Search - FastAPI application around an in-memory BM25 search engine

Endpoints:
- Ingest plain-text documents (JSON batch) or uploaded files (TXT / CSV / PDF)
- Ranked free-text queries with snippets
- Entity / topic analysis of arbitrary text
- Clear the collection

Architecture:
- One SearchEngine per application, created in lifespan and kept on app.state
- Writers (ingest, upload, clear) are serialized with an asyncio.Lock
- Ingestion yields to the event loop between chunks, so queries keep being
  served while a large batch is indexed (they see every finished chunk)
- Nothing is persisted: restarting the process empties the index
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

# Load environment variables from .env.local (local dev) or .env (production)
from dotenv import load_dotenv

env_local = Path(__file__).parent.parent / ".env.local"
env_file = Path(__file__).parent.parent / ".env"

if env_local.exists():
    load_dotenv(env_local, override=True)
elif env_file.exists():
    load_dotenv(env_file, override=True)

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from . import config
from .document_processor import DocumentProcessingError, DocumentProcessor
from .logging_config import setup_logging
from .search_engine import SearchEngine

logger = logging.getLogger(__name__)

# Version tracking
APP_VERSION = "1.0.0"
APP_START_TIME = datetime.now(timezone.utc)

document_processor = DocumentProcessor()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources"""
    setup_logging(
        log_file=config.LOG_FILE or None,
        console_level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        file_level=logging.DEBUG,  # Always DEBUG in file for troubleshooting
    )

    app.state.engine = SearchEngine()
    app.state.write_lock = asyncio.Lock()
    logger.info(
        f"Search engine initialized (k1={app.state.engine.scorer.k1}, b={app.state.engine.scorer.b}, "
        f"chunk_size={app.state.engine.index.chunk_size})"
    )

    yield

    logger.info("Shutting down...")
    app.state.engine.clear()


app = FastAPI(
    title="Semantic NLP Search API",
    description="In-memory BM25 document search with entity and topic extraction",
    version=APP_VERSION,
    lifespan=lifespan,
)


def get_engine(request: Request) -> SearchEngine:
    return request.app.state.engine


class DocumentRejectedError(HTTPException):
    """Uploaded file could not be turned into documents"""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
        )


# Pydantic models
class HealthResponse(BaseModel):
    status: str
    version: str
    started_at: str
    uptime_seconds: float
    documents: int


class DocumentIn(BaseModel):
    id: str = Field(..., min_length=1, description="Caller-assigned id, unique within the collection")
    content: str = Field(default="", description="Plain-text content")
    filename: str = Field(default="", description="Source filename")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Arbitrary metadata")


class IngestRequest(BaseModel):
    documents: List[DocumentIn]
    analyze: bool = Field(
        default=True,
        description="Add extracted entities/topics to metadata that does not already have them"
    )


class IngestResponse(BaseModel):
    received: int
    indexed: int = Field(..., description="New documents (already indexed ids are skipped)")
    total_documents: int


class UploadResponse(BaseModel):
    filename: str
    documents_created: int
    indexed: int
    total_documents: int


class ClearResponse(BaseModel):
    cleared: int
    message: str


class QueryRequest(BaseModel):
    query: str = Field(..., description="Free-text query")
    limit: int = Field(
        default=config.DEFAULT_SEARCH_LIMIT,
        ge=1,
        le=config.MAX_SEARCH_LIMIT,
        description="Maximum number of results",
    )


class QueryResultItem(BaseModel):
    document_id: str
    filename: str
    score: float
    snippet: str
    metadata: Dict[str, Any]


class QueryResponse(BaseModel):
    query: str
    results: List[QueryResultItem]
    total: int


class AnalyzeRequest(BaseModel):
    text: str


class AnalyzeResponse(BaseModel):
    entities: List[str]
    topics: List[str]


class StatsResponse(BaseModel):
    documents: int
    terms: int
    average_document_length: float


def build_documents(request: IngestRequest) -> List[Dict[str, Any]]:
    """Convert request items into document mappings, adding analysis when asked."""
    documents = []
    for item in request.documents:
        metadata = dict(item.metadata or {})
        if request.analyze:
            for key, value in SearchEngine.analyze_text(item.content).items():
                metadata.setdefault(key, value)
        documents.append({
            "id": item.id,
            "content": item.content,
            "filename": item.filename,
            "metadata": metadata,
        })
    return documents


# Routes
@app.get("/", response_model=dict)
async def root():
    """Root endpoint"""
    return {
        "service": "Semantic NLP Search API",
        "version": APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", response_model=HealthResponse)
async def health(engine: SearchEngine = Depends(get_engine)):
    """Health check endpoint"""
    uptime = (datetime.now(timezone.utc) - APP_START_TIME).total_seconds()

    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        started_at=APP_START_TIME.isoformat(),
        uptime_seconds=round(uptime, 2),
        documents=len(engine),
    )


@app.post("/v1/documents", response_model=IngestResponse)
async def ingest_documents(
    request: IngestRequest,
    http_request: Request,
    engine: SearchEngine = Depends(get_engine),
):
    """
    Index a batch of plain-text documents.

    Documents whose id is already indexed are skipped silently; documents
    without any index terms are stored but never match a query.
    """
    # Analysis is CPU-bound; keep it off the event loop like file processing
    documents = await asyncio.to_thread(build_documents, request)

    async with http_request.app.state.write_lock:
        before = len(engine)
        await engine.ingest_async(documents)
        indexed = len(engine) - before

    return IngestResponse(
        received=len(documents),
        indexed=indexed,
        total_documents=len(engine),
    )


@app.post("/v1/documents/upload", response_model=UploadResponse)
async def upload_document(
    http_request: Request,
    file: UploadFile = File(...),
    engine: SearchEngine = Depends(get_engine),
):
    """
    Upload a TXT, CSV or PDF file and index its documents.

    - TXT: one document
    - CSV: one document per row
    - PDF: one document with all pages
    """
    file_content = await file.read()
    filename = file.filename or "upload.txt"

    try:
        documents = await asyncio.to_thread(document_processor.process_file, filename, file_content)
    except DocumentProcessingError as e:
        logger.warning(f"Rejected upload {filename}: {e}")
        raise DocumentRejectedError(f"Failed to process {filename}: {e}")

    async with http_request.app.state.write_lock:
        before = len(engine)
        await engine.ingest_async(documents)
        indexed = len(engine) - before

    return UploadResponse(
        filename=filename,
        documents_created=len(documents),
        indexed=indexed,
        total_documents=len(engine),
    )


@app.delete("/v1/documents", response_model=ClearResponse)
async def clear_documents(http_request: Request, engine: SearchEngine = Depends(get_engine)):
    """Remove every document from the collection."""
    async with http_request.app.state.write_lock:
        cleared = len(engine)
        engine.clear()

    return ClearResponse(cleared=cleared, message=f"Removed {cleared} documents")


@app.post("/v1/query", response_model=QueryResponse)
async def query_documents(request: QueryRequest, engine: SearchEngine = Depends(get_engine)):
    """
    Ranked lexical search.

    An empty query, a query made only of stopwords, or an empty collection
    returns an empty result list (not an error).
    """
    results = engine.query(request.query, request.limit)

    return QueryResponse(
        query=request.query,
        results=[QueryResultItem(**result.to_dict()) for result in results],
        total=len(results),
    )


@app.post("/v1/analyze", response_model=AnalyzeResponse)
async def analyze_text(request: AnalyzeRequest):
    """Extract entities (max 10) and topics (max 5) from text."""
    return AnalyzeResponse(**SearchEngine.analyze_text(request.text))


@app.get("/v1/stats", response_model=StatsResponse)
async def collection_stats(engine: SearchEngine = Depends(get_engine)):
    """Document count, vocabulary size and average document length."""
    return StatsResponse(**engine.stats())


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "detail": str(exc),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=config.PORT,
    )
