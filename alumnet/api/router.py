from fastapi import APIRouter

from alumnet.modules.accounts import routes as accounts
from alumnet.modules.connections import routes as connections
from alumnet.modules.jobs import routes as jobs
from alumnet.modules.messaging import routes as messaging
from alumnet.modules.profiles import routes as profiles

api_router = APIRouter(prefix="/v1")

api_router.include_router(accounts.router)
api_router.include_router(profiles.router)
api_router.include_router(jobs.router)
api_router.include_router(connections.router)
api_router.include_router(messaging.router)
