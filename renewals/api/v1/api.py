from fastapi import APIRouter
from renewals.api.v1.routes.auth import router as auth_router
from renewals.api.v1.routes.customers import router as customers_router
from renewals.api.v1.routes.cron import router as cron_router
from renewals.api.v1.routes.send_logs import router as send_logs_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(customers_router)
api_router.include_router(cron_router)
api_router.include_router(send_logs_router)
