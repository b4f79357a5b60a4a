from fastapi import APIRouter

router = APIRouter()

from app.api.endpoints import auth, requests, users

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(requests.router, prefix="/requests", tags=["requests"])
router.include_router(users.router, prefix="/users", tags=["users"])
