from fastapi import APIRouter
from .account import router as account_router
from .jobs import router as jobs_router
from .webhooks import router as webhooks_router

router = APIRouter()
router.include_router(account_router)
router.include_router(jobs_router)
router.include_router(webhooks_router)
