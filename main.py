"""news-syncer status API.

Read-only views over the sync database: per-source progress and the most
recently published articles. Run with ``python main.py``.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI

from api.routes import router
from config import API_HOST, API_PORT
from db.database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    init_db()
    yield


app = FastAPI(
    title="news-syncer",
    description="Sync progress and latest articles",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(router)

if __name__ == "__main__":
    uvicorn.run(app, host=API_HOST, port=API_PORT)
