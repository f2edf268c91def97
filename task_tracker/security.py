from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
import bcrypt

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, BCRYPT_ROUNDS, SECRET_KEY
from .errors import InvalidToken, TokenExpired

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as proven by a verified token."""
    user_id: str
    email: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8') if isinstance(hashed_password, str) else hashed_password
    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt directly."""
    password_bytes = password.encode('utf-8')[:72]  # Truncate to 72 bytes (bcrypt limit)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def create_access_token(identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT for the given identity."""
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": identity.user_id,
        "email": identity.email,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Identity:
    """Verify signature and expiry, returning the identity the token carries."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpired() from None
    except JWTError:
        raise InvalidToken() from None

    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise InvalidToken()
    return Identity(user_id=str(user_id), email=str(email))
