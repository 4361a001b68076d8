from fastapi import FastAPI, File, UploadFile, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import logging
import time
from typing import List, Optional
from datetime import datetime

from src.notebook import (
    NotebookPipeline,
    NotebookConfig,
    Conversation,
    SUPPORTED_EXTENSIONS,
    DuplicateSourceError,
    UnsupportedFileTypeError,
    ExtractionError,
    EmbeddingMismatchError,
    ProviderError,
)
from src.notebook.file_processor import get_extension

# ==================== Setup ====================

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT
    )


# ==================== Pydantic Models ====================

class QueryRequest(BaseModel):
    """Request body for query endpoint."""
    question: str


class QueryResponse(BaseModel):
    """Response for query."""
    question: str
    answer: str
    response_time: float
    status: str


class UploadResponse(BaseModel):
    """Response for document upload."""
    source: str
    chunks_indexed: int
    status: str
    timestamp: str


class DocumentsResponse(BaseModel):
    """Response for document listing."""
    sources: List[str]
    total_chunks: int
    timestamp: str


class MessageModel(BaseModel):
    id: str
    role: str
    content: str


class HealthResponse(BaseModel):
    """Response for health check."""
    status: str
    provider: str
    documents: int
    timestamp: str


class StatsResponse(BaseModel):
    """Response for stats."""
    sources: List[str]
    total_chunks: int
    config: dict
    timestamp: str


# ==================== App Factory ====================

def create_app(pipeline: Optional[NotebookPipeline] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        pipeline: Optional pre-built pipeline (tests inject one with fake
            providers). Built from environment on startup otherwise.
    """
    app = FastAPI(
        title="Document Notebook",
        description="Upload documents and ask questions answered only from them",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.pipeline = pipeline
    app.state.conversation = Conversation()

    # ==================== Startup/Shutdown ====================

    @app.on_event("startup")
    async def startup_event():
        """Initialize pipeline on startup. Bad configuration stops the server."""
        if app.state.pipeline is not None:
            return

        config = NotebookConfig.from_env()
        configure_logging(config.log_level)

        logger.info("=" * 60)
        logger.info("Starting Document Notebook API")
        logger.info("=" * 60)
        config.log_summary(logger)

        try:
            app.state.pipeline = NotebookPipeline(config=config.validate())
        except Exception as e:
            logger.error(f"Failed to initialize pipeline: {e}")
            raise

        logger.info("✓ Pipeline initialized successfully")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown."""
        logger.info("Shutting down Document Notebook API")

    def get_pipeline() -> NotebookPipeline:
        if app.state.pipeline is None:
            raise HTTPException(status_code=503, detail="Pipeline not initialized")
        return app.state.pipeline

    # ==================== Health & Status ====================

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Check system health."""
        pipeline = get_pipeline()
        return HealthResponse(
            status="healthy",
            provider=pipeline.config.provider,
            documents=len(pipeline.list_sources()),
            timestamp=datetime.now().isoformat()
        )

    @app.get("/stats", response_model=StatsResponse)
    async def get_stats():
        """Get pipeline statistics."""
        stats = get_pipeline().get_stats()
        return StatsResponse(
            sources=stats['sources'],
            total_chunks=stats['total_chunks'],
            config=stats['config'],
            timestamp=datetime.now().isoformat()
        )

    # ==================== Document Management ====================

    @app.get("/documents", response_model=DocumentsResponse)
    async def list_documents():
        """List uploaded documents."""
        pipeline = get_pipeline()
        return DocumentsResponse(
            sources=pipeline.list_sources(),
            total_chunks=pipeline.vector_store.size(),
            timestamp=datetime.now().isoformat()
        )

    # Plain def: extraction and embedding block, so they run on the worker pool.
    @app.post("/documents", response_model=UploadResponse)
    def upload_document(file: UploadFile = File(...)):
        """
        Upload and index a document (.txt, .md, .pdf, .xlsx).

        Example:
            curl -X POST "http://localhost:8000/documents" \
              -F "file=@notes.pdf"
        """
        pipeline = get_pipeline()
        conversation = app.state.conversation
        name = file.filename or ""

        if pipeline.vector_store.has_source(name):
            raise HTTPException(status_code=409, detail=f'File "{name}" is already uploaded.')

        if f".{get_extension(name)}" not in SUPPORTED_EXTENSIONS:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file type: .{get_extension(name)}"
            )

        conversation.append("system", f'Processing "{name}"...', kind="file-processing")

        try:
            result = pipeline.upload_document(name, file.file.read())
        except DuplicateSourceError as e:
            raise HTTPException(status_code=409, detail=str(e))
        except (UnsupportedFileTypeError, ExtractionError, EmbeddingMismatchError, ProviderError) as e:
            logger.error(f"Upload of {name} failed: {e}")
            conversation.append(
                "system", f'Error processing file "{name}": {e}', kind="file-error"
            )
            if isinstance(e, UnsupportedFileTypeError):
                status_code = 415
            elif isinstance(e, ExtractionError):
                status_code = 422
            elif isinstance(e, ProviderError):
                status_code = 502
            else:
                status_code = 500
            raise HTTPException(status_code=status_code, detail=str(e))

        conversation.append(
            "system", f'File "{name}" processed and ready.', kind="file-upload"
        )
        return UploadResponse(
            source=result['source'],
            chunks_indexed=result['chunks_indexed'],
            status="success",
            timestamp=datetime.now().isoformat()
        )

    @app.delete("/documents/{name}")
    async def delete_document(name: str):
        """Delete a document and all its chunks."""
        get_pipeline().delete_document(name)
        app.state.conversation.append(
            "system", f'File "{name}" and its chunks have been removed.', kind="file-delete"
        )
        return {
            "status": "success",
            "source": name,
            "timestamp": datetime.now().isoformat()
        }

    # ==================== Query Endpoint ====================

    @app.post("/query", response_model=QueryResponse)
    def query(request: QueryRequest):
        """
        Ask a question about the uploaded documents.

        Provider failures come back as an "Error: ..." answer with status "error".

        Example:
            curl -X POST "http://localhost:8000/query" \
              -H "Content-Type: application/json" \
              -d '{"question": "What is machine learning?"}'
        """
        pipeline = get_pipeline()
        conversation = app.state.conversation
        question = request.question.strip()

        if not question:
            raise HTTPException(status_code=400, detail="Question must not be empty")

        conversation.append("user", question)
        start_time = time.time()

        try:
            answer = pipeline.ask(question)
            status = "success"
            conversation.append("ai", answer)
        except (ProviderError, EmbeddingMismatchError) as e:
            logger.error(f"Query failed: {e}")
            answer = f"Error: {e}"
            status = "error"
            conversation.append("ai", answer, kind="error")

        return QueryResponse(
            question=question,
            answer=answer,
            response_time=round(time.time() - start_time, 3),
            status=status
        )

    @app.get("/messages", response_model=List[MessageModel])
    async def list_messages():
        """Conversation so far, oldest first."""
        return [MessageModel(**m.to_dict()) for m in app.state.conversation.messages()]

    @app.post("/reset")
    async def reset_system():
        """Clear all documents and the conversation."""
        get_pipeline().reset()
        app.state.conversation = Conversation()
        logger.warning("RESET: Cleared all documents and messages")
        return {
            "status": "success",
            "message": "All documents and messages cleared",
            "timestamp": datetime.now().isoformat()
        }

    # ==================== Error Handlers ====================

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "status": "error",
                "timestamp": datetime.now().isoformat()
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "status": "error",
                "timestamp": datetime.now().isoformat()
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
