from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from app.api import auth, inventory, recipes, shopping_list
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.redis_client import close_redis_client
from app.models.database import Base, engine
import logging
import time

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: make sure every table exists
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database ready ({settings.environment})")

    yield

    # Shutdown: Close Redis connection
    close_redis_client()

app = FastAPI(
    title="Alacena API",
    description="Pantry inventory, recipes and shopping lists",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
    return response

register_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/v1")
app.include_router(inventory.router, prefix="/v1")
app.include_router(recipes.router, prefix="/v1")
app.include_router(shopping_list.router, prefix="/v1")

@app.get("/")
def root():
    return {
        "name": "Alacena API",
        "version": "1.0.0",
        "status": "operational"
    }

@app.get("/health")
def health_check():
    return {"status": "OK", "message": "Server is running"}
