import secrets
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from storefront.auth.constants import MIN_PASSWORD_LENGTH, SPECIALS
from storefront.config.settings import config_settings

pwd_context = CryptContext(schemes=[config_settings.PASS_HASH_SCHEME], deprecated="auto")


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def validate_password(password: str, min_length: int = MIN_PASSWORD_LENGTH) -> tuple[bool, str]:
    pw = password.strip()
    if len(pw) < min_length:
        return False, f"Password must be at least {min_length} characters long"
    if not any(c.islower() for c in pw):
        return False, "Password must include at least one lowercase letter"
    if not any(c.isupper() for c in pw):
        return False, "Password must include at least one uppercase letter"
    if not any(c.isdigit() for c in pw):
        return False, "Password must include at least one digit"
    if not any(c in SPECIALS for c in pw):
        return False, "Password must include at least one special character"
    return True, "OK"


def create_access_token(user_public_id, role: str, expires_dur: int = config_settings.ACCESS_TOKEN_EXPIRE_MINUTES):
    issued = datetime.now(timezone.utc)
    expiry = issued + timedelta(minutes=expires_dur)

    payload = {
        "sub": str(user_public_id),
        "iat": int(issued.timestamp()),
        "exp": int(expiry.timestamp()),
        "jti": secrets.token_hex(16),
        "role": role,
    }
    return jwt.encode(claims=payload, key=config_settings.JWT_SECRET, algorithm=config_settings.JWT_ALGO)


def decode_token(token: str):
    """Verify signature and expiry, return the claims or None"""
    try:
        return jwt.decode(token, key=config_settings.JWT_SECRET, algorithms=[config_settings.JWT_ALGO])
    except JWTError:
        return None
