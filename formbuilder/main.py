import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.endpoints import forms, public, responses, templates
from .core.config import ALLOWED_ORIGINS, APP_HOST, APP_PORT, LOG_LEVEL, RELOAD_APP
from .core.errors import (
    FormBuilderError,
    NotFound,
    StorageUnavailable,
    ValidationError,
)
from .database import create_db_and_tables, engine

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# --- Lifecycle Events ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Anwendung startet...")
    await create_db_and_tables()
    yield
    logger.info("Anwendung fährt herunter...")
    await engine.dispose()


# --- FastAPI App Instanz ---
app = FastAPI(title="Form Builder Backend", lifespan=lifespan)

# --- CORS Middleware (für Frontend-Zugriff) ---
logger.info(f"CORS: Erlaubte Origins: {ALLOWED_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Fehlerbehandlung: alle Fehler als {"error": "..."} ---

_STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    StorageUnavailable: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _status_for(exc: FormBuilderError) -> int:
    for exc_type, code in _STATUS_CODES.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(FormBuilderError)
async def form_builder_error_handler(request: Request, exc: FormBuilderError):
    code = _status_for(exc)
    if code >= 500:
        logger.error(f"{request.method} {request.url.path} fehlgeschlagen: {exc}")
    return JSONResponse(status_code=code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Ungültige Anfrage an {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid form data"},
    )


# --- Router ---
app.include_router(forms.router)
app.include_router(responses.router)
app.include_router(public.router)
app.include_router(templates.router)


@app.get("/")
async def read_root():
    return {"message": "Willkommen zum Form Builder Backend!"}


# --- Starten der Anwendung ---

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("formbuilder.main:app", host=APP_HOST, port=APP_PORT, reload=RELOAD_APP)
