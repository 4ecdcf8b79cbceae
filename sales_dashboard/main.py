# sales_dashboard/main.py
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from sales_dashboard.api.v1.routers import api_router
from sales_dashboard.core.dependencies import get_settings

load_dotenv()  # Load environment variables from .env file

APP_NAME = "Sales Insights Dashboard"

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("sales_dashboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    level = get_settings().LOG_LEVEL.upper()
    logging.getLogger().setLevel(level)
    logger.info(f"{APP_NAME} started with log level {level}")
    yield


app = FastAPI(
    title=APP_NAME,
    description="Refreshes BigQuery sales metrics into spreadsheet reports.",
    lifespan=lifespan,
)
app.include_router(api_router, prefix="/api/v1")


@app.get("/health", summary="Liveness probe")
def health():
    return {"status": "ok"}
