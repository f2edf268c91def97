import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import Conflict, InvalidCredentials, NotFound, Unauthenticated
from ..models import User
from ..schemas.user import AuthResponse, RegisterResponse, User as UserSchema, UserCreate, UserLogin
from ..security import Identity, create_access_token, decode_access_token, get_password_hash, verify_password
from ..validation import valid_body

logger = logging.getLogger(__name__)

router = APIRouter()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user; unknown email and wrong password look the same."""
    user = db.query(User).filter(User.email == email).first()
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def _get_token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credentials.strip() or None


async def get_current_user(request: Request) -> Identity:
    """Resolve the caller's identity from the bearer token.

    Stateless: the token's signature and expiry are the only checks, so no
    database round-trip happens here.
    """
    token = _get_token_from_request(request)
    if not token:
        raise Unauthenticated()
    return decode_access_token(token)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    user: UserCreate = Depends(valid_body(UserCreate)),
    db: Session = Depends(get_db),
):
    """Create a new user account."""
    if db.query(User).filter(User.email == user.email).first():
        raise Conflict("Email already registered.")

    db_user = User(
        name=user.name,
        email=user.email,
        hashed_password=get_password_hash(user.password),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info(f"Registered user {db_user.id}")

    return {"message": "User registered successfully.", "user": db_user}


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin = Depends(valid_body(UserLogin)),
    db: Session = Depends(get_db),
):
    """Exchange email and password for a bearer token."""
    db_user = authenticate_user(db, credentials.email, credentials.password)
    if not db_user:
        raise InvalidCredentials()

    access_token = create_access_token(Identity(user_id=db_user.id, email=db_user.email))
    return {
        "message": "Login successful.",
        "token": access_token,
        "token_type": "bearer",
        "user": db_user,
    }


@router.get("/me", response_model=UserSchema)
def read_users_me(
    current_user: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get current user information."""
    user = db.query(User).filter(User.id == current_user.user_id).first()
    if user is None:
        raise NotFound("User not found.")
    return user
