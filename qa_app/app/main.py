from __future__ import annotations

"""FastAPI application entrypoint for the private document Q&A service."""

import logging
import uuid

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from qa_app.app.dependencies import (
    get_answer_service,
    get_document_store,
    get_upload_directory,
)
from qa_app.app.metrics import metrics_middleware, metrics_response, record_answer
from qa_app.app.schemas import (
    AskRequest,
    AskResponse,
    DocumentOut,
    HealthResponse,
    MessageResponse,
    UploadResponse,
)
from qa_app.app.settings import settings
from qa_app.loaders.text import decode_text_bytes
from qa_app.rag.errors import NotFoundError, StorageIOError, ValidationError
from qa_app.rag.service import AnswerService, question_hash
from qa_app.store.memory import InMemoryDocumentStore
from qa_app.store.uploads import UploadDirectory

logger = logging.getLogger(__name__)

app = FastAPI(title="Private Document Q&A", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


_configure_logging()


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", str(uuid.uuid4()))


async def _read_upload_bytes(upload: UploadFile, max_bytes: int | None) -> bytes:
    """Stream upload bytes with a hard size limit."""
    if not max_bytes or max_bytes <= 0:
        return await upload.read()
    buffer = bytearray()
    while True:
        chunk = await upload.read(65536)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise ValidationError(f"File exceeds maximum size of {max_bytes} bytes")
    return bytes(buffer)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info(
        "request_rejected",
        extra={"request_id": _request_id(request), "detail": str(exc)},
    )
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.info(
        "request_rejected",
        extra={"request_id": _request_id(request), "detail": message},
    )
    return JSONResponse(status_code=400, content={"detail": f"Invalid request: {message}"})


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach or create a request ID for traceability."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response()


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Simple health probe for uptime checks."""
    return HealthResponse(status="Server is running")


@app.get("/api/documents", response_model=list[DocumentOut])
async def list_documents(
    store: InMemoryDocumentStore = Depends(get_document_store),
) -> list[DocumentOut]:
    """Return uploaded documents in upload order."""
    return [DocumentOut.from_document(document) for document in store.list()]


@app.delete("/api/documents/{doc_id}", response_model=MessageResponse)
async def delete_document(
    doc_id: str,
    http_request: Request,
    store: InMemoryDocumentStore = Depends(get_document_store),
) -> MessageResponse:
    """Delete a document and its stored file."""
    try:
        parsed_id = int(doc_id)
    except ValueError:
        raise NotFoundError("Document not found") from None
    deleted = store.delete(parsed_id)
    if deleted is None:
        raise NotFoundError("Document not found")
    logger.info(
        "document_deleted",
        extra={"request_id": _request_id(http_request), "document_id": deleted.id},
    )
    return MessageResponse(message="Document deleted successfully")


@app.post("/api/upload", response_model=UploadResponse)
async def upload_document(
    http_request: Request,
    file: UploadFile | None = File(None),
    store: InMemoryDocumentStore = Depends(get_document_store),
    uploads: UploadDirectory = Depends(get_upload_directory),
) -> UploadResponse:
    """Store an uploaded text file and register it as a document."""
    if file is None:
        raise ValidationError("No file uploaded")
    request_id = _request_id(http_request)
    original_name = file.filename or "upload.txt"
    data = await _read_upload_bytes(file, settings.file_max_bytes)
    if not data:
        raise ValidationError("Uploaded file is empty")

    stored_filename: str | None = None
    stored_path: str | None = None
    try:
        stored = uploads.save(original_name, data)
        stored_filename = stored.filename
        stored_path = str(stored.path)
    except StorageIOError as exc:
        logger.error(
            "upload_file_write_failed",
            extra={"request_id": request_id, "detail": str(exc)},
        )

    document = store.add(
        name=original_name,
        content=decode_text_bytes(data),
        size=len(data),
        filename=stored_filename,
        path=stored_path,
    )
    logger.info(
        "document_uploaded",
        extra={
            "request_id": request_id,
            "document_id": document.id,
            "size": document.size,
            "stored": stored_path is not None,
        },
    )
    return UploadResponse(
        message="File uploaded successfully",
        document=DocumentOut.from_document(document),
    )


@app.post("/api/ask", response_model=AskResponse)
async def ask(
    http_request: Request,
    request: AskRequest | None = None,
    store: InMemoryDocumentStore = Depends(get_document_store),
    service: AnswerService = Depends(get_answer_service),
) -> AskResponse:
    """Answer a question from the uploaded documents."""
    question = request.question if request is not None else None
    request_id = _request_id(http_request)
    documents = store.list()
    logger.info(
        "ask_received",
        extra={
            "request_id": request_id,
            "question_length": len(question or ""),
            "question_hash": question_hash(question or ""),
            "documents": len(documents),
        },
    )
    result = await service.answer(question, documents)
    record_answer(result.method)
    logger.info(
        "ask_completed",
        extra={
            "request_id": request_id,
            "method": result.method.value,
            "sources": len(result.sources),
            "answer_length": len(result.answer),
        },
    )
    return AskResponse.from_result(question or "", result)


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("qa_app.app.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
