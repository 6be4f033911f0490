# emergicare/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from emergicare.common.database.database import connect_to_db, close_db_connection
from emergicare.common.config import settings
from emergicare.common.exceptions import register_exception_handlers
from emergicare.common.logging import setup_logging
from emergicare.router.routers import include_routers

setup_logging()

# Lifespan context manager for startup and shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_db()
    yield
    await close_db_connection()

# Initialize FastAPI app with lifespan manager
app = FastAPI(
    title="EmergiCare API",
    description="After-hours emergency consultations: patients request care, doctors claim and resolve it",
    version="1.0.0",
    lifespan=lifespan
)

# Middleware for CORS using allowed origins from settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers from a separate file
include_routers(app)
