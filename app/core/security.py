import hmac
import bcrypt
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError

ALGORITHM = "HS256"
SESSION_COOKIE = "session_token"


def hash_code(code: str) -> str:
    # Used to produce GALLERY_ACCESS_CODE_HASH values
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(code.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_code_hash(plain_code: str, hashed_code: str) -> bool:
    """Raises ValueError when ``hashed_code`` is not a bcrypt hash."""
    return bcrypt.checkpw(plain_code.encode("utf-8"), hashed_code.encode("utf-8"))


def codes_match(submitted: str, expected: str) -> bool:
    return hmac.compare_digest(submitted.encode("utf-8"), expected.encode("utf-8"))


def create_session_token(session_id: str, secret_key: str, ttl_seconds: int) -> str:
    expire = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
    to_encode = {"sub": session_id, "exp": expire}
    return jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)


def read_session_token(token: str, secret_key: str) -> Optional[str]:
    """Returns the session id carried by ``token``, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub") or None
