from loguru import logger
from alumnet.core.db import engine, Base

# Import all models so SQLAlchemy registers them
from alumnet.models.profile import Profile
from alumnet.models.job import Job
from alumnet.modules.connections.models import Connection, Message

def init_db(bind=engine):
    logger.info("Creating database tables")
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables created")
