import logging
import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Add project root to path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from config.settings_loader import get_log_level
from landing_prefs.schemas.state_schemas import SCHEMA_VERSION
from shared.state import get_landing_preferences

logging.basicConfig(level=get_log_level())
logger = logging.getLogger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 API Starting up...")
    get_landing_preferences()

    yield

    logger.info("🛑 API Shutting down...")
    # Shutdown is the last chance to report dwell time for the open view
    get_landing_preferences().end_view_session()


app = FastAPI(lifespan=lifespan)

# Enable CORS for the portfolio pages
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_origin_regex=r"http://localhost:(517\d|5555)",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Import and Include Routers ===
from routers import preferences as preferences_router
app.include_router(preferences_router.router)


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "version": "1.0.0",
        "schema_version": SCHEMA_VERSION,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api:app", host="0.0.0.0", port=8000, reload=True)
