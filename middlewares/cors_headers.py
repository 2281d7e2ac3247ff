# middlewares/cors_headers.py
from fastapi.middleware.cors import CORSMiddleware
from services.settings import CORS_ORIGINS

# la API es de sólo lectura salvo las sesiones (prefetch / delete)
ALLOWED_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]


def add_cors_middleware(app, origins: list[str] | None = None):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins if origins is not None else CORS_ORIGINS,
        allow_credentials=False,  # sin cookies ni Authorization
        allow_methods=ALLOWED_METHODS,
        allow_headers=["Content-Type", "Accept", "Origin"],
        max_age=86400,
    )
