# scrapgo/services/identity.py
import hmac
import logging
import uuid
from typing import Optional

from scrapgo.core.config import Settings, settings as default_settings
from scrapgo.core.errors import AuthError, Result
from scrapgo.models.identity import ROLES, Identity

logger = logging.getLogger(__name__)

DEVICE_SESSION = "device"

DEFAULT_NAMES = {"customer": "Customer User", "partner": "Partner User"}

class IdentityProvider:
    """Phone + one-time-code login bound to a single session slot in the store.

    The code is checked against ``settings.demo_otp``; nothing is actually sent
    to the phone.
    """

    def __init__(self, repo, settings: Settings = default_settings, session_id: str = DEVICE_SESSION):
        self.repo = repo
        self.settings = settings
        self.session_id = session_id

    async def authenticate(self, phone: str, code: str, role: str, name: Optional[str] = None) -> Result:
        if role not in ROLES:
            raise ValueError(f"unknown role {role!r}")
        if not hmac.compare_digest(str(code).encode(), self.settings.demo_otp.encode()):
            logger.info("login rejected for %s (%s)", phone, role)
            return Result.failure(AuthError.INVALID_CODE, "verification code is not valid")

        identity = Identity(
            id=f"{role}_{uuid.uuid4().hex}",
            phone=phone,
            name=name or DEFAULT_NAMES[role],
            role=role,
        )
        await self.repo.save_session(self.session_id, identity)
        logger.info("session %s opened for %s", self.session_id, identity.id)
        return Result.success(identity)

    async def current(self) -> Optional[Identity]:
        return await self.repo.load_session(self.session_id)

    async def end_session(self) -> None:
        await self.repo.delete_session(self.session_id)
