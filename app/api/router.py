"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from app.api.auth import router as auth_router
from app.api.job_orders import router as job_orders_router
from app.api.workflow import router as workflow_router
from app.api.steps import router as steps_router
from app.api.timecards import router as timecards_router
from app.api.standby import router as standby_router
from app.api.inventory import router as inventory_router
from app.api.admin import router as admin_router

api_router = APIRouter()
api_router.include_router(auth_router)
api_router.include_router(job_orders_router)
api_router.include_router(workflow_router)
api_router.include_router(steps_router)
api_router.include_router(timecards_router)
api_router.include_router(standby_router)
api_router.include_router(inventory_router)
api_router.include_router(admin_router)
