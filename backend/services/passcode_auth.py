"""
Local-first passcode authentication.

Single-user deployments protect the local store with a passcode. Only a
salted SHA-256 digest is kept, under the ``auth_metadata`` metadata key.
"""
import hashlib
import hmac
import secrets
from typing import Optional

from pydantic import ValidationError as SchemaError

from backend.services.audit_recorder import AuditRecorder
from backend.services.entities import AuditAction, AuthMetadata
from backend.storage.base import AUTH_METADATA, METADATA, PersistenceAdapter
from backend.utils.logger import get_logger
from backend.utils.validators import validate_passcode

logger = get_logger(__name__)


def hash_passcode(passcode: str, salt: str) -> str:
    return hashlib.sha256((passcode + salt).encode("utf-8")).hexdigest()


def generate_salt() -> str:
    return secrets.token_hex(16)


class PasscodeAuth:

    def __init__(self, adapter: PersistenceAdapter, audit: Optional[AuditRecorder] = None):
        self.adapter = adapter
        self.audit = audit
        self.is_authenticated = False

    async def _record(self, action: AuditAction, details: str) -> None:
        if self.audit is not None:
            await self.audit.append(action, details)

    async def get_metadata(self) -> Optional[AuthMetadata]:
        """Stored credentials; a malformed record reads as not set up"""
        entry = await self.adapter.get(METADATA, AUTH_METADATA)
        if not entry:
            return None
        try:
            return AuthMetadata.model_validate(entry["value"])
        except (KeyError, SchemaError) as e:
            logger.warning(f"Ignoring malformed auth metadata: {e}")
            return None

    async def is_setup_required(self) -> bool:
        metadata = await self.get_metadata()
        return metadata is None or not metadata.is_setup

    async def setup_passcode(self, passcode: str) -> None:
        """Create (or wholesale overwrite) the stored credentials and sign in"""
        passcode = validate_passcode(passcode)
        salt = generate_salt()
        metadata = AuthMetadata(passcode_hash=hash_passcode(passcode, salt), salt=salt, is_setup=True)

        await self.adapter.put(METADATA, {"key": AUTH_METADATA, "value": metadata.to_record()})
        self.is_authenticated = True
        await self._record(AuditAction.AUTH, "Passcode configured")

    async def login(self, passcode: str) -> bool:
        """True on match; a rejected passcode gives no further detail"""
        metadata = await self.get_metadata()
        if metadata is None or not passcode:
            return False

        attempt = hash_passcode(passcode, metadata.salt)
        if hmac.compare_digest(attempt, metadata.passcode_hash):
            self.is_authenticated = True
            await self._record(AuditAction.AUTH, "Session unlocked")
            return True

        logger.info("Rejected passcode attempt")
        await self._record(AuditAction.AUTH, "Failed unlock attempt")
        return False

    async def logout(self) -> None:
        self.is_authenticated = False
        await self._record(AuditAction.SESSION_CLEAR, "Session locked")
