# /classroom-ai-backend/app/main.py

# --- Core FastAPI Imports ---
import os
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# --- Application-specific Router Imports ---
from .routers import auth_router, classrooms_router, sessions_router
from .db.database import init_db
from .services import storage_service

load_dotenv()
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Runs once on startup: the SQL store needs its table.
    if storage_service.USE_SQL_STORE:
        init_db()
    yield


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="Classroom AI Backend",
    description="Classrooms, student chat sessions and their retention for the Classroom AI chat tool.",
    version="1.0.0",
    lifespan=lifespan,
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Router Inclusion ---
app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(classrooms_router.router, prefix="/api/classrooms", tags=["Classrooms"])
app.include_router(sessions_router.router, prefix="/api/sessions", tags=["Chat Sessions"])


# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "Classroom AI Backend is running!", "version": app.version}
