from dotenv import load_dotenv

load_dotenv()

import logging
import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api import auth
from app.api import images
from app.api import download
from app.api import gallery
from app.api import upload
from app.api import system
from app.api.system_utils.request_metrics import track_request_metrics

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Wedding Gallery Backend",
    description="""
    API for the wedding photo gallery.
    Guests unlock the gallery with the shared access code (typed in or carried
    by the QR link), then browse, upload, select and bulk-download the photos
    hosted on Cloudinary.
    """,
    version="1.0.0",
    license_info={
        "name": "MIT",
    },
)

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL, "http://127.0.0.1:3000", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Content-Type"],
    expose_headers=["Content-Disposition"],
)

@app.middleware("http")
async def middleware(request, call_next):
    return await track_request_metrics(request, call_next)


@app.on_event("shutdown")
async def on_shutdown():
    store = getattr(app.state, "media_store", None)
    if store is not None:
        await store.close()
        logger.info("Media store client closed")


# Public Routes
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(system.router, prefix="/api", tags=["System"])

# Guest Routes (session cookie required)
app.include_router(images.router, prefix="/api", tags=["Images"])
app.include_router(download.router, prefix="/api", tags=["Download"])
app.include_router(upload.router, prefix="/api", tags=["Upload"])
app.include_router(gallery.router, prefix="/api/gallery", tags=["Gallery"])


@app.get("/")
async def root():
    return {"message": "Wedding Gallery API is running"}
