from dotenv import load_dotenv
import os

load_dotenv()

ENV = os.getenv("NODE_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = int(os.getenv("PORT", "3000"))

# Cliente InnerTube (WEB_REMIX = music.youtube.com)
INNERTUBE_CLIENT = os.getenv("INNERTUBE_CLIENT", "WEB_REMIX")

# Cache de respuestas crudas: en memoria, se pierde al reiniciar
CACHE_TTL = int(os.getenv("CATALOG_CACHE_TTL", str(5 * 60)))  # 5 minutos
CACHE_MAX_ENTRIES = int(os.getenv("CATALOG_CACHE_MAX_ENTRIES", "50"))

# Continuaciones que se piden por adelantado sin que el usuario scrollee
PREFETCH_MAX_PAGES = int(os.getenv("PREFETCH_MAX_PAGES", "4"))

# Browse ids de las páginas que expone la API
BROWSE_IDS = {
    "home": "FEmusic_home",
    "explore": "FEmusic_explore",
    "charts": "FEmusic_charts",
    "moods": "FEmusic_moods_and_genres",
    "new_releases": "FEmusic_new_releases",
}

# Orígenes del front (separados por coma)
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:8080,http://127.0.0.1:8080,http://localhost:5173,http://127.0.0.1:5173",
    ).split(",")
    if o.strip()
]
