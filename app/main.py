from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.deps import init_db
from app.errors import (AlreadySignedOffError, PersistenceError, SignoffValidationError,
                        UnknownHandoffError)
from app.routers import handoffs

logging.basicConfig(level=settings.LOG_LEVEL,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    log.info("sign-off mode: %s", settings.SIGNOFF_MODE)
    yield

app = FastAPI(title="Hand-off Dashboard", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(SignoffValidationError)
def _validation_error(request: Request, exc: SignoffValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc), "missing": exc.missing})

@app.exception_handler(UnknownHandoffError)
def _unknown_handoff(request: Request, exc: UnknownHandoffError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(AlreadySignedOffError)
def _already_signed(request: Request, exc: AlreadySignedOffError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})

@app.exception_handler(PersistenceError)
def _persistence_error(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})

@app.get("/healthz")
def healthz():
    return {"status": "ok", "signoff_mode": settings.SIGNOFF_MODE}

app.include_router(handoffs.router, prefix="/handoffs", tags=["handoffs"])
