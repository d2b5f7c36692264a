import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config import LOG_LEVEL
from routers import dashboard_router, data_router, file_router, upload_router
from routers.deps import get_user_id
from services.dashboard_service import get_overview
from services.errors import DashboardAppError
from models.dashboard_models import Overview

# Import DB init function
from database import Base, engine, get_db
from models import dashboard_db_model  # noqa: F401  registers tables

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_db():
    Base.metadata.create_all(bind=engine)


app = FastAPI(
    title="Spreadsheet Dashboard Builder",
    description="Upload a spreadsheet, build chart dashboards from it, optionally with AI suggestions.",
    version="0.1.0",
)


# Run create_db() once when app starts
@app.on_event("startup")
def on_startup():
    logger.info("Initializing database...")
    create_db()
    logger.info("Database initialized.")


@app.exception_handler(DashboardAppError)
async def handle_app_error(request: Request, exc: DashboardAppError):
    logger.warning("%s %s failed: %s (%s)", request.method, request.url.path, exc.title, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload_router.router)
app.include_router(file_router.router)
app.include_router(data_router.router)
app.include_router(dashboard_router.router)


@app.get("/")
async def root():
    return {"message": "Spreadsheet Dashboard API is running"}


@app.get("/overview", response_model=Overview)
def overview(db: Session = Depends(get_db), user_id: str = Depends(get_user_id)):
    return get_overview(db, user_id)
