import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from zk_bounty.api.routes import router
from zk_bounty.config import BountyConfig
from zk_bounty.core.escrow import EscrowError
from zk_bounty.zk.groth16 import Groth16Verifier

logger = logging.getLogger("zk_bounty.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = BountyConfig.from_env()
    logger.info(
        f"Starting escrow validation API (network={config.network}, data_length={config.data_length})"
    )

    app.state.config = config
    if getattr(app.state, "verifier", None) is None:
        app.state.verifier = Groth16Verifier()

    yield


app = FastAPI(
    title="zk-bounty escrow API",
    description="Binding, disclosure and escrow-transition validation for zero-knowledge key bounties",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


@app.exception_handler(EscrowError)
async def escrow_error_handler(request: Request, exc: EscrowError):
    return JSONResponse(
        status_code=409,
        content={"detail": type(exc).__name__, "message": str(exc)},
    )


@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok"}
