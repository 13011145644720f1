import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admin import router as admin_router
from blog import router as blog_router
from captcha import router as captcha_router
from core import db
from core.errors import install_exception_handlers
from core.settings import load_settings
from profiles import router as profiles_router
from share import router as share_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

settings = load_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Settings and the DB pool are created once per process.
    app.state.settings = settings
    await db.init_pool(settings.database_url)
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)
app.state.settings = settings

# Allow the web frontend to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

app.include_router(admin_router.router, tags=["admin"])
app.include_router(blog_router.router, tags=["blog"])
app.include_router(profiles_router.router, tags=["profiles"])
app.include_router(captcha_router.router, tags=["captcha"])
app.include_router(share_router.router, tags=["share"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
