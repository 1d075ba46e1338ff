"""API v1: matches, curvas, tickets, payments, house wins and commissions."""

from fastapi import APIRouter

from .commissions import router as commissions_router
from .house_wins import router as house_wins_router
from .matches import router as matches_router
from .tickets import router as tickets_router
from .users import router as users_router

router = APIRouter(prefix="/api/v1", tags=["api_v1"])
router.include_router(matches_router)
router.include_router(tickets_router)
router.include_router(house_wins_router)
router.include_router(users_router)
router.include_router(commissions_router)

api_v1_router = router
