import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.exceptions import register_exception_handlers
from .api.routes import auth_router, payment_router, system_router
from .core.config import get_settings
from .core.db import init_db

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.verify_wallet_signatures:
        logger.warning(
            "Wallet signatures are only checked for shape; "
            "set FULLONCRYPTO_VERIFY_WALLET_SIGNATURES=true to recover the signer"
        )
    if settings.eager_connect:
        init_db()
    yield

app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(payment_router)
app.include_router(system_router)
register_exception_handlers(app)

@app.get("/")
def read_root() -> dict[str, str]:
    return {"message": settings.app_name}

def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)

if __name__ == "__main__":
    run()
