from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from alumnet.core.logging import setup_logging
from alumnet.core.init_db import init_db
from alumnet.api.router import api_router

setup_logging()
logger.info("Starting Alumnet backend")


app = FastAPI(
    title="Alumnet Backend",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# All API routes (auth, profiles, directory, jobs, connections, messages)
app.include_router(api_router)

# Init DB after app is created
init_db()

@app.get("/health")
def health():
    logger.debug("Health check hit")
    return {"status": "ok"}
