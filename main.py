from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config.settings import settings
from database.db import init_db

# ✅ logging (one format for app + request lines)
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logging.getLogger("passlib").setLevel(logging.ERROR)

# ✅ middleware imports
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ router imports
from routers import auth, classes, export, grades, students, tasks

logger = logging.getLogger(__name__)


# ✅ schema + fixed classes/subjects before the first request
@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("%s started (env=%s)", settings.APP_TITLE, settings.ENV)
    yield


app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# ✅ CORS (front-end origins from settings)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ request latency + request id (X-Latency-Ms / X-Request-ID response headers)
app.add_middleware(TimingMiddleware)

# ✅ global error handlers (consistent JSON error envelope)
add_error_handlers(app)

# ✅ routers under the API prefix
app.include_router(auth.router,     prefix=settings.API_PREFIX)
app.include_router(classes.router,  prefix=settings.API_PREFIX)
app.include_router(students.router, prefix=settings.API_PREFIX)
app.include_router(grades.router,   prefix=settings.API_PREFIX)
app.include_router(tasks.router,    prefix=settings.API_PREFIX)
app.include_router(export.router,   prefix=settings.API_PREFIX)


# ✅ health check
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running"}


# ✅ root endpoint
@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - {settings.APP_DESCRIPTION}"}
