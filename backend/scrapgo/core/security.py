from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from scrapgo.core.config import Settings, settings as default_settings


def create_token(session_id: str, role: str, settings: Settings = default_settings,
                 minutes: Optional[int] = None) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": session_id,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=minutes or settings.access_ttl_min),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)


def decode_token(token: str, settings: Settings = default_settings) -> Optional[Dict[str, Any]]:
    """Return the token claims, or None when the token is expired or tampered with."""
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
    except jwt.InvalidTokenError:
        return None
