import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from sietch import __version__
from sietch.routers import auth, dashboard, groups, matches, players, ratings
from sietch.services.errors import MatchmakingError, StoreUnavailable

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Sietch",
    description="Squad matchmaking and group lifecycle service for desert expeditions",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(players.router)
app.include_router(groups.router)
app.include_router(matches.router)
app.include_router(ratings.router)
app.include_router(dashboard.router)


def _error_response(exc: MatchmakingError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(MatchmakingError)
async def matchmaking_error_handler(request: Request, exc: MatchmakingError):
    return _error_response(exc)


# IntegrityError is translated by the services, never here
@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
@app.exception_handler(DisconnectionError)
@app.exception_handler(PoolTimeoutError)
async def store_unavailable_handler(request: Request, exc: Exception):
    logger.error("Data store error on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(StoreUnavailable())


@app.get("/health")
async def health_check():
    return {"status": "ok"}
