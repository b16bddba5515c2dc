from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from query_console.console.router import page_router as console_page_router
from query_console.console.router import router as console_router
from query_console.console.transport import close_transport_client
from query_console.core.logging import setup_logging

setup_logging()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    try:
        yield
    finally:
        await close_transport_client()


app = FastAPI(title="Federation Query Console", lifespan=lifespan)

_STATIC_DIR = Path(__file__).resolve().parent / "static"
if _STATIC_DIR.is_dir():
    app.mount("/static", StaticFiles(directory=str(_STATIC_DIR)), name="static")

app.include_router(console_page_router)
app.include_router(console_router)
