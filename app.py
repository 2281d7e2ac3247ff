# app.py
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from routes import index, browse, debug
from middlewares.cors_headers import add_cors_middleware
from services.catalog_client import CatalogClient
from services.pagination import SessionStore
from services.response_cache import ResponseCache
from services.settings import ENV, LOG_LEVEL, CACHE_TTL, CACHE_MAX_ENTRIES

logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("uvicorn.error")

# Crear la app
app = FastAPI(title="catalog-normalizer")

# CORS siempre primero
add_cors_middleware(app)

logger.info(f"🚀 Iniciando FastAPI con ENV={ENV}")

# Estado explícito de la app: cliente InnerTube (con su cache) y sesiones de paginación
app.state.catalog = CatalogClient(cache=ResponseCache(ttl=CACHE_TTL, max_entries=CACHE_MAX_ENTRIES))
app.state.sessions = SessionStore()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.debug(f"➡️ Request recibido: {request.method} {request.url}")
    response = await call_next(request)
    logger.debug(f"⬅️ Response enviado: {response.status_code} {request.url}")
    return response


# 🚨 Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc)},
    )

# Rutas principales
app.include_router(index.router, prefix="/api")
app.include_router(browse.router, prefix="/api/music")

# Rutas de debug (solo en desarrollo)
if ENV != "production":
    app.include_router(debug.router, prefix="/debug")
