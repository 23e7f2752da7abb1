"""
User endpoints:
  GET /user/profile — the signed-in caller's profile
"""
from fastapi import APIRouter, Depends, HTTPException, status

from app.auth import Identity, get_identity
from app.schemas import UserProfile

router = APIRouter()


@router.get("/profile", response_model=UserProfile)
async def get_profile(identity: Identity = Depends(get_identity)):
    if identity.user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return identity.user
