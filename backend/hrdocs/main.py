import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hrdocs.config import settings
from hrdocs.errors import DocumentError
from hrdocs.routers import audit, document_types, employee_documents, folders

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("hrdocs")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: apply the schema to the configured store
    from hrdocs.database import init_db
    init_db()
    yield


app = FastAPI(
    title="HR Documents",
    description="Employee document compliance and lifecycle engine",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(DocumentError)
async def document_error_handler(request: Request, exc: DocumentError):
    logger.info("%s %s rejected: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(folders.router, prefix=settings.api_prefix)
app.include_router(document_types.router, prefix=settings.api_prefix)
app.include_router(employee_documents.router, prefix=settings.api_prefix)
app.include_router(audit.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
