# main.py
import uvicorn
from services.settings import ENV, PORT

if __name__ == "__main__":
    uvicorn.run(
        "app:app",           # módulo:objeto
        host="0.0.0.0",      # escucha en todas las interfaces
        port=PORT,
        reload=ENV != "production",  # autoreload sólo en desarrollo
    )
