import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from database.db import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# quiet HTTP client debug logs
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

# ✅ middlewares
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ routers
from routers import grades, reports, students, subjects


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# ✅ CORS (frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ X-Latency-Ms response header
app.add_middleware(TimingMiddleware)

# ✅ JSON error envelope
add_error_handlers(app)

# ✅ /v1 routers
app.include_router(students.router, prefix="/v1")
app.include_router(subjects.router, prefix="/v1")
app.include_router(grades.router,   prefix="/v1")
app.include_router(reports.router,  prefix="/v1")   # ✅ Gemini reports


# ✅ health check
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running"}


@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - {settings.APP_DESCRIPTION}"}
