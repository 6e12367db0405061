"""
Read-only access to the on-chain passport registry.

The registry contract exposes a single view accessor:

    getApplication(string passportID) returns (
        string passportID, address userWallet, string status,
        string qrURL, string ipfsHash, uint256 createdAt, uint256 updatedAt)

RegistryResolver turns that tuple into a RegistryRecord, applies an
eligibility predicate to its status and surfaces the CID only when allowed.
"Not found", "not eligible" and "eligible but no CID" all resolve to None.
Transport or contract-call failures raise RegistryUnavailableError instead.
"""

import asyncio
from typing import Callable, Optional

import aiohttp
from web3 import AsyncWeb3
from web3.exceptions import Web3Exception
from web3.providers import AsyncHTTPProvider

from Passport_Retrieval.pr_shared import config
from Passport_Retrieval.pr_shared.errors import ConfigurationError, RegistryUnavailableError
from Passport_Retrieval.pr_shared.logger import get_logger
from Passport_Retrieval.pr_shared.types import RegistryRecord, RegistryStatus

log = get_logger("passport.registry")

EligibilityPredicate = Callable[[Optional[RegistryStatus]], bool]

REGISTRY_ABI = [
    {
        "type": "function",
        "name": "getApplication",
        "stateMutability": "view",
        "inputs": [{"name": "_passportID", "type": "string"}],
        "outputs": [
            {"name": "passportID", "type": "string"},
            {"name": "userWallet", "type": "address"},
            {"name": "status", "type": "string"},
            {"name": "qrURL", "type": "string"},
            {"name": "ipfsHash", "type": "string"},
            {"name": "createdAt", "type": "uint256"},
            {"name": "updatedAt", "type": "uint256"},
        ],
    }
]


# ── Eligibility predicates ──


def is_approved(status: Optional[RegistryStatus]) -> bool:
    """Strict: public verification only sees approved passports."""
    return status is RegistryStatus.APPROVED


def has_status(status: Optional[RegistryStatus]) -> bool:
    """Permissive: admin inspection also sees Pending and Rejected."""
    return status is not None


# ── Registry clients ──


class RegistryClient:
    """Narrow read interface over the registry contract."""

    async def get_record(self, lookup_key: str) -> tuple:
        raise NotImplementedError

    async def is_connected(self) -> bool:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class ContractRegistryClient(RegistryClient):
    """getApplication() over JSON-RPC via web3."""

    def __init__(
        self,
        rpc_url: str = config.RPC_URL,
        contract_address: str = config.CONTRACT_ADDRESS,
        timeout: float = config.REGISTRY_TIMEOUT_SECONDS,
    ):
        try:
            address = AsyncWeb3.to_checksum_address(contract_address)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"invalid CONTRACT_ADDRESS {contract_address!r}: {e}")

        self.timeout = timeout
        self._w3 = AsyncWeb3(AsyncHTTPProvider(
            rpc_url,
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=timeout)},
        ))
        self._contract = self._w3.eth.contract(address=address, abi=REGISTRY_ABI)
        log.info(f"[REGISTRY] rpc={rpc_url} contract={address}")

    async def get_record(self, lookup_key: str) -> tuple:
        try:
            call = self._contract.functions.getApplication(lookup_key).call()
            result = await asyncio.wait_for(call, timeout=self.timeout)
        except (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            raise RegistryUnavailableError(lookup_key, f"{type(e).__name__}: {e}") from e
        return tuple(result)

    async def is_connected(self) -> bool:
        try:
            return await asyncio.wait_for(self._w3.is_connected(), timeout=self.timeout)
        except (Web3Exception, aiohttp.ClientError, asyncio.TimeoutError, OSError):
            return False

    async def close(self) -> None:
        await self._w3.provider.disconnect()


# ── Resolver ──


class RegistryResolver:
    def __init__(self, client: RegistryClient):
        self.client = client

    async def resolve(self, lookup_key: str, predicate: EligibilityPredicate) -> Optional[RegistryRecord]:
        raw = await self.client.get_record(lookup_key)

        if not raw or not raw[0]:
            log.info(f"[REGISTRY] {lookup_key} not found")
            return None

        record = RegistryRecord.from_tuple(raw)

        if not predicate(record.status):
            status = record.status.value if record.status else "none"
            log.info(f"[REGISTRY] {lookup_key} not eligible (status={status})")
            return None

        if not record.cid:
            log.info(f"[REGISTRY] {lookup_key} eligible but has no CID")
            return None

        return record

    async def resolve_cid(self, lookup_key: str, predicate: EligibilityPredicate) -> Optional[str]:
        record = await self.resolve(lookup_key, predicate)
        return record.cid if record is not None else None
