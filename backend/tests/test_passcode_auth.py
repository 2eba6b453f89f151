"""
Local passcode authentication tests
"""
import pytest

from backend.services.entities import AuditAction
from backend.services.passcode_auth import PasscodeAuth, hash_passcode
from backend.storage.base import AUTH_METADATA, METADATA
from backend.utils.errors import ValidationError


@pytest.fixture()
def auth(memory_store, recorder):
    return PasscodeAuth(memory_store, audit=recorder)


async def test_setup_required_initially(auth):
    assert await auth.is_setup_required()
    assert not auth.is_authenticated


async def test_setup_stores_only_salted_hash(auth, memory_store):
    await auth.setup_passcode("1234")

    stored = (await memory_store.get(METADATA, AUTH_METADATA))["value"]
    assert stored["isSetup"] is True
    assert len(stored["salt"]) == 32
    assert stored["passcodeHash"] == hash_passcode("1234", stored["salt"])
    assert "1234" not in stored.values()
    assert auth.is_authenticated
    assert not await auth.is_setup_required()


async def test_login(auth, recorder):
    await auth.setup_passcode("open sesame")
    await auth.logout()
    assert not auth.is_authenticated

    assert not await auth.login("wrong")
    assert not auth.is_authenticated

    assert await auth.login("open sesame")
    assert auth.is_authenticated

    actions = [e.action for e in recorder.list()]
    assert actions == [AuditAction.AUTH, AuditAction.AUTH, AuditAction.SESSION_CLEAR, AuditAction.AUTH]


async def test_login_before_setup(auth):
    assert not await auth.login("anything")


async def test_resetup_overwrites(auth):
    await auth.setup_passcode("first")
    await auth.setup_passcode("second")
    await auth.logout()

    assert not await auth.login("first")
    assert await auth.login("second")


async def test_empty_passcode_rejected(auth):
    with pytest.raises(ValidationError):
        await auth.setup_passcode("")


def test_hash_is_sha256_hex():
    assert hash_passcode("abc", "") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


@pytest.mark.parametrize("record", [
    {"key": AUTH_METADATA},
    {"key": AUTH_METADATA, "value": "not-an-object"},
    {"key": AUTH_METADATA, "value": {"salt": "abc"}},
])
async def test_malformed_metadata_reads_as_not_setup(auth, memory_store, record):
    await memory_store.put(METADATA, record)

    assert await auth.is_setup_required()
    assert not await auth.login("anything")
    assert not auth.is_authenticated
