from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from memoria.core.config import settings
from memoria.core.errors import (
    MemoriaException,
    memoria_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from memoria.core.logging_config import setup_logging
from memoria.db.base import StorageContext, Store, get_storage
from memoria.routers import food as food_router
from memoria.routers import history as history_router
from memoria.routers import maintenance as maintenance_router
from memoria.routers import memories as memories_router
from memoria.routers import moods as moods_router
from memoria.routers import people as people_router
from memoria.routers import places as places_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings)
    # Stores open lazily on first use.
    storage = StorageContext(settings)
    app.state.storage = storage
    yield
    storage.dispose()


app = FastAPI(
    title="Memoria API",
    description=(
        "**Personal journal storage**: moods, places, people, food and memories, "
        "linked through a typed relationship graph.\n\n"
        "Saving an entity resolves the places and people it mentions by name and "
        "links them both ways; history endpoints walk those links.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(MemoriaException, memoria_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(moods_router.router)
app.include_router(places_router.router)
app.include_router(people_router.router)
app.include_router(food_router.router)
app.include_router(memories_router.router)
app.include_router(maintenance_router.router)
app.include_router(history_router.router)


@app.get("/health", tags=["health"], summary="Health check")
def health(storage: StorageContext = Depends(get_storage)):
    """
    Returns `{"status": "ok", "stores": {...}}` when every store answers.
    Returns HTTP 503 naming the unreachable stores otherwise.
    """
    stores = {}
    for store in Store:
        try:
            with storage.session(store) as db:
                db.execute(text("SELECT 1"))
            stores[store.value] = "ok"
        except (SQLAlchemyError, OSError):
            stores[store.value] = "unreachable"

    if any(s != "ok" for s in stores.values()):
        return JSONResponse(
            status_code=503,
            content={"status": "error", "stores": stores},
        )
    return {"status": "ok", "stores": stores, "env": settings.APP_ENV}
