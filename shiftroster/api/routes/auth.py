from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shiftroster.api.deps import get_db
from shiftroster.core.security import verify_password, create_access_token
from shiftroster.db.models.users import Users
from shiftroster.schemas.auth import Token, LoginRequest

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(Users).filter(Users.username == payload.username).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account disabled")

    token = create_access_token(user_id=user.id, username=user.username)
    return Token(access_token=token)
