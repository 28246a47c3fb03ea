import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from portfolio.core.config import settings
from portfolio.core.database import init_db
from portfolio.core.exceptions import ServiceError
from portfolio.core.scheduler import start_scheduler, stop_scheduler
from portfolio.api.routes import admin, auth, contact

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: Create database and tables, start the session cleanup job
    Shutdown: Stop background scheduler
    """
    # Raises (and aborts startup) when the database is unreachable,
    # unless DB_BOOTSTRAP_REQUIRED is disabled
    init_db()
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Portfolio API",
    description="Member accounts, contact messages and admin dashboard",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,  # Session cookie must be sent cross-origin
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Render domain errors as the {success, message} envelope"""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


# API routes must be registered before the static mount below
app.include_router(auth.router, prefix="/api")
app.include_router(contact.router, prefix="/api")
app.include_router(admin.router, prefix="/api")


@app.get("/health")
async def health():
    """Health check endpoint - used by monitoring/deployment tools"""
    return {"status": "healthy"}


# Static site for every path not matched above
app.mount(
    "/",
    StaticFiles(directory=settings.STATIC_DIR, html=True, check_dir=False),
    name="static",
)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Server running at http://localhost:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
