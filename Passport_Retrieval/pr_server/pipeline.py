"""
Retrieval pipeline: registry → gateway → decrypt, with a result cache.

Per-request states:
    Start      → cache hit              → Served
    ResolveCid → None                   → NotFound
    ResolveCid → FetchBytes → Decrypt   → Served (result cached)
    any stage error                     → Failed

Admin inspection and public verification are two named configurations of the
same pipeline.  They differ only in eligibility predicate, and each owns its
own cache so a Pending record cached for admins is never served to verify.
"""

from typing import Any, Mapping, Optional

from Passport_Retrieval.pr_chain.registry import (
    EligibilityPredicate,
    RegistryResolver,
    has_status,
    is_approved,
)
from Passport_Retrieval.pr_server.cache import RetrievalCache
from Passport_Retrieval.pr_shared.codec import PayloadCodec
from Passport_Retrieval.pr_shared.errors import (
    DecryptionError,
    FetchExhaustedError,
    NotFoundError,
    RegistryUnavailableError,
    RetrievalFailedError,
    UnrecognizedStatusError,
)
from Passport_Retrieval.pr_shared.logger import get_logger
from Passport_Retrieval.pr_shared.types import JsonScalar, RetrievalResult, VerificationResult
from Passport_Retrieval.pr_storage.gateway import GatewayFetcher

log = get_logger("passport.pipeline")

# decrypted field → verification field; nothing outside this map is exposed
VERIFY_FIELDS = {
    "full_name": "name",
    "nationality": "nationality",
    "submitted_at": "issued_on",
}


def _scalar(value: Any) -> Optional[JsonScalar]:
    if isinstance(value, (str, int, float, bool)):
        return value
    return None


def project_verification(result: RetrievalResult) -> VerificationResult:
    record = result.record if isinstance(result.record, Mapping) else {}
    fields = {target: _scalar(record.get(source)) for source, target in VERIFY_FIELDS.items()}
    status = result.status.value if result.status is not None else None
    return VerificationResult(status=status, **fields)


class RetrievalPipeline:
    def __init__(
        self,
        resolver: RegistryResolver,
        fetcher: GatewayFetcher,
        codec: PayloadCodec,
        cache: RetrievalCache,
        predicate: EligibilityPredicate,
        name: str = "pipeline",
    ):
        self.resolver = resolver
        self.fetcher = fetcher
        self.codec = codec
        self.cache = cache
        self.predicate = predicate
        self.name = name

    async def retrieve(self, lookup_key: str) -> RetrievalResult:
        cached = self.cache.get(lookup_key)
        if cached is not None:
            log.info(f"[{self.name}] cache hit", extra={"stage": "cache", "lookup_key": lookup_key, "cid": cached.cid})
            return cached

        try:
            record = await self.resolver.resolve(lookup_key, self.predicate)
        except (RegistryUnavailableError, UnrecognizedStatusError) as e:
            raise self._failed("resolve", lookup_key, e) from e

        if record is None:
            raise NotFoundError(lookup_key)

        decrypted = await self._fetch_and_decrypt(record.cid, lookup_key)

        result = RetrievalResult(
            lookup_key=lookup_key,
            cid=record.cid,
            status=record.status,
            record=decrypted,
        )
        self.cache.put(lookup_key, result)
        log.info(f"[{self.name}] served", extra={"stage": "served", "lookup_key": lookup_key, "cid": record.cid})
        return result

    async def decrypt_cid(self, cid: str) -> Any:
        """Fetch and decrypt a CID directly, skipping registry and cache."""
        return await self._fetch_and_decrypt(cid, cid)

    async def verify(self, lookup_key: str) -> VerificationResult:
        return project_verification(await self.retrieve(lookup_key))

    async def _fetch_and_decrypt(self, cid: str, lookup_key: str) -> Any:
        try:
            packed = await self.fetcher.fetch_bytes(cid)
        except FetchExhaustedError as e:
            raise self._failed("fetch", lookup_key, e, cid) from e

        try:
            return self.codec.decrypt(packed)
        except DecryptionError as e:
            raise self._failed("decrypt", lookup_key, e, cid) from e

    def _failed(self, stage: str, lookup_key: str, cause: Exception, cid: str = "-") -> RetrievalFailedError:
        log.error(
            f"[{self.name}] failed: {type(cause).__name__}: {cause}",
            extra={"stage": stage, "lookup_key": lookup_key, "cid": cid},
        )
        return RetrievalFailedError(stage, lookup_key, cause)


# ── Named configurations ──


def admin_pipeline(
    resolver: RegistryResolver,
    fetcher: GatewayFetcher,
    codec: PayloadCodec,
    cache: Optional[RetrievalCache] = None,
) -> RetrievalPipeline:
    if cache is None:
        cache = RetrievalCache()
    return RetrievalPipeline(resolver, fetcher, codec, cache, has_status, name="admin")


def verification_pipeline(
    resolver: RegistryResolver,
    fetcher: GatewayFetcher,
    codec: PayloadCodec,
    cache: Optional[RetrievalCache] = None,
) -> RetrievalPipeline:
    if cache is None:
        cache = RetrievalCache()
    return RetrievalPipeline(resolver, fetcher, codec, cache, is_approved, name="verify")
