import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import LOG_LEVEL
from routers import upload_router, data_router, chat_router
from services.llm_service import LLMService
from services.session_service import DatasetStore

# Import DB init function
from database import Base, engine
from models.session_db_model import SessionDB

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

def create_db():
    Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Sheet Chat Backend",
    description="Ask questions about an uploaded spreadsheet: local profiling and queries, model answers, charts.",
    version="0.1.0",
)

# Dataset snapshots and the model client are owned by the app
app.state.datasets = DatasetStore()
app.state.llm = LLMService()

# Run create_db() once when app starts
@app.on_event("startup")
def on_startup():
    logger.info("Initializing database (%s table)...", SessionDB.__tablename__)
    create_db()
    logger.info("Database initialized.")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(upload_router.router)
app.include_router(data_router.router)
app.include_router(chat_router.router)

@app.get("/")
async def root():
    return {"message": "Sheet Chat API is running"}
