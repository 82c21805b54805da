# FastAPI Server for the MonHubImmo collaboration platform

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm.exc import StaleDataError
import logging
import sys
from dotenv import load_dotenv

from database.config import init_db
from config.app_config import CORS_ORIGINS, LOG_LEVEL, PLATFORM_NAME
from services.errors import InternalError
from routers.collaborations import router as collaborations_router
from routers.contracts import router as contracts_router
from routers.admin_collaborations import router as admin_collaborations_router
from routers.notifications import router as notifications_router

load_dotenv()

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=f"{PLATFORM_NAME} API",
    description="Collaboration and contract API for real-estate professionals",
    version="1.0.0"
)


@app.on_event("startup")
def startup_event():
    init_db()
    logger.info("Database tables initialized")


# CORS Setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Requête invalide") if errors else "Requête invalide"
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message, "errors": jsonable_errors(errors)},
    )


@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError):
    logger.warning(f"Concurrent update rejected on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "La collaboration a été modifiée entre-temps, veuillez réessayer"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


def jsonable_errors(errors: list) -> list:
    return [
        {"loc": list(e.get("loc", [])), "msg": e.get("msg"), "type": e.get("type")}
        for e in errors
    ]


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(collaborations_router, prefix="/api")
app.include_router(contracts_router, prefix="/api")
app.include_router(admin_collaborations_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")


@app.get("/")
def root():
    return {
        "message": f"{PLATFORM_NAME} API",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
