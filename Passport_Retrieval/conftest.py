import hashlib
import json
import os

import httpx
import pytest
import pytest_asyncio
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from Passport_Retrieval.pr_chain.registry import RegistryClient

PASSPHRASE = "correct horse battery staple"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
OWNER_ADDRESS = "0x1111111111111111111111111111111111111111"

MIRRORS = [
    "https://mirror-one.test/ipfs",
    "https://mirror-two.test/ipfs/",
]

JANE_DOE = {
    "full_name": "Jane Doe",
    "nationality": "NZ",
    "submitted_at": "2024-01-01",
    "date_of_birth": "1990-05-04",
    "files": {"photo.png": "iVBORw0KGgo="},
}


def seal_value(value, passphrase: str = PASSPHRASE) -> bytes:
    """Test-only write path: nonce | tag | ciphertext."""
    key = hashlib.sha256(passphrase.encode("utf-8")).digest()
    nonce = os.urandom(12)
    sealed = AESGCM(key).encrypt(nonce, json.dumps(value).encode("utf-8"), None)
    return nonce + sealed[-16:] + sealed[:-16]


def registry_tuple(lookup_key, status, cid="", owner=OWNER_ADDRESS):
    return (lookup_key, owner, status, f"https://verify.test/{lookup_key}", cid, 1704067200, 1704153600)


MISSING = ("", ZERO_ADDRESS, "", "", "", 0, 0)


class FakeRegistryClient(RegistryClient):
    """In-memory stand-in for the registry contract; counts calls."""

    def __init__(self, records=None, error=None):
        self.records = dict(records or {})
        self.error = error
        self.connected = True
        self.closed = False
        self.calls: list[str] = []

    async def get_record(self, lookup_key: str) -> tuple:
        self.calls.append(lookup_key)
        if self.error is not None:
            raise self.error
        return self.records.get(lookup_key, MISSING)

    async def is_connected(self) -> bool:
        return self.connected

    async def close(self) -> None:
        self.closed = True


class FakeGateway:
    """httpx.MockTransport handler serving blobs by CID from chosen mirrors."""

    def __init__(self):
        self.blobs: dict[str, bytes] = {}
        self.status_by_host: dict[str, int] = {}
        self.broken_hosts: set[str] = set()
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(str(request.url))
        host = request.url.host
        if host in self.broken_hosts:
            raise httpx.ConnectError("connection refused", request=request)
        if host in self.status_by_host:
            return httpx.Response(self.status_by_host[host])

        cid = request.url.path.rsplit("/", 1)[-1]
        if cid not in self.blobs:
            return httpx.Response(404)
        return httpx.Response(200, content=self.blobs[cid])


@pytest.fixture
def passphrase():
    return PASSPHRASE


@pytest.fixture
def seal():
    return seal_value


@pytest.fixture
def jane_doe():
    return dict(JANE_DOE)


@pytest.fixture
def mirrors():
    return list(MIRRORS)


@pytest.fixture
def fake_registry():
    return FakeRegistryClient({
        "PP-1": registry_tuple("PP-1", "Approved", "Qm123"),
        "PP-2": registry_tuple("PP-2", "Pending"),
        "PP-3": registry_tuple("PP-3", "Pending", "QmPending3"),
        "PP-4": registry_tuple("PP-4", "Rejected", "QmRejected4"),
        "PP-5": registry_tuple("PP-5", "Approved", "   "),
    })


@pytest.fixture
def gateway():
    gw = FakeGateway()
    gw.blobs["Qm123"] = seal_value(JANE_DOE)
    gw.blobs["QmPending3"] = seal_value({"full_name": "Pat Pending", "nationality": "AU"})
    gw.blobs["QmRejected4"] = seal_value({"full_name": "Rex Rejected", "nationality": "FJ"})
    return gw


@pytest_asyncio.fixture
async def http_client(gateway):
    client = httpx.AsyncClient(transport=httpx.MockTransport(gateway))
    yield client
    await client.aclose()
