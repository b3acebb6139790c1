"""
Security: password hashing and signed session tokens.
Passwords are one-way hashed; the session cookie only carries a signed session id.
"""

from datetime import datetime

from jose import JWTError, jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SESSION_TOKEN_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    """One-way hash for storage. Never store plain passwords."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Constant-time comparison for login."""
    return pwd_context.verify(plain, hashed)


def encode_session_token(session_id: str, expires_at: datetime, secret: str) -> str:
    """Sign a session id for the cookie. The token stops verifying at `expires_at`."""
    return jwt.encode(
        {"sid": session_id, "exp": expires_at},
        secret,
        algorithm=SESSION_TOKEN_ALGORITHM,
    )


def decode_session_token(token: str, secret: str) -> str | None:
    """Return the session id from a cookie token, or None if tampered with or expired."""
    try:
        payload = jwt.decode(token, secret, algorithms=[SESSION_TOKEN_ALGORITHM])
    except JWTError:
        return None
    session_id = payload.get("sid")
    return session_id if isinstance(session_id, str) and session_id else None
