from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from vintage_admin.api import artists, auth, featured, genres, maintenance, playlists, songs, users
from vintage_admin.core.config import settings
import vintage_admin.models.registry  # noqa: F401  (registers every table on Base.metadata)
import traceback
import logging
import uvicorn # For running programmatically
import os # For path manipulation


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("vintage_admin")
logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.SQL_ECHO else logging.WARNING)

app = FastAPI(title="Vintage Admin API", debug=settings.DEBUG)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# A unique constraint lost a race with the explicit pre-checks
@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(
        status_code=409,
        content={"detail": {"message": "The change conflicts with an existing record"}},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    error_detail = traceback.format_exc()
    logger.error(f"Unhandled exception: {str(exc)}\n{error_detail}")
    content = {"error": "Internal server error", "path": request.url.path}
    if settings.DEBUG:
        content["error"] = str(exc)
        content["detail"] = error_detail
    return JSONResponse(status_code=500, content=content)


# Include routes
app.include_router(auth.router, prefix=settings.API_PREFIX, tags=["Authentication"])
app.include_router(users.router, prefix=settings.API_PREFIX, tags=["users"])
app.include_router(artists.router, prefix=settings.API_PREFIX, tags=["artists"])
app.include_router(songs.router, prefix=settings.API_PREFIX, tags=["songs"])
app.include_router(genres.router, prefix=settings.API_PREFIX, tags=["genres"])
app.include_router(playlists.router, prefix=settings.API_PREFIX, tags=["playlists"])
app.include_router(featured.router, prefix=settings.API_PREFIX, tags=["featured"])
app.include_router(maintenance.router, prefix=settings.API_PREFIX, tags=["maintenance"])


@app.get("/")
async def root():
    return {"message": "Welcome to Vintage Admin API"}


if __name__ == "__main__":
    # Run with `python Backend/main.py`; hosted deployments pass PORT through the environment
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, log_level=settings.LOG_LEVEL.lower())
