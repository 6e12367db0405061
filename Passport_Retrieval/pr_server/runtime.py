from typing import Optional

import httpx

from Passport_Retrieval.pr_chain.registry import ContractRegistryClient, RegistryClient, RegistryResolver
from Passport_Retrieval.pr_server.pipeline import RetrievalPipeline, admin_pipeline, verification_pipeline
from Passport_Retrieval.pr_shared.codec import PayloadCodec
from Passport_Retrieval.pr_shared.logger import get_logger
from Passport_Retrieval.pr_storage.gateway import GatewayFetcher

log = get_logger("passport.runtime")

admin: RetrievalPipeline = None
verifier: RetrievalPipeline = None
registry_client: RegistryClient = None
http_client: httpx.AsyncClient = None


async def create_runtime(
    passphrase: Optional[str] = None,
    client: Optional[RegistryClient] = None,
    mirrors: Optional[list[str]] = None,
) -> None:
    """Build both pipeline configurations. Fails fast without a passphrase."""
    global admin, verifier, registry_client, http_client
    if admin is not None:
        return

    codec = PayloadCodec(passphrase)
    registry_client = client if client is not None else ContractRegistryClient()
    http_client = httpx.AsyncClient(follow_redirects=True)

    resolver = RegistryResolver(registry_client)
    fetcher = GatewayFetcher(http_client, mirrors=mirrors)

    admin = admin_pipeline(resolver, fetcher, codec)
    verifier = verification_pipeline(resolver, fetcher, codec)
    log.info(f"[RUNTIME] ready with {len(fetcher.mirrors)} mirrors")


async def close_runtime() -> None:
    global admin, verifier, registry_client, http_client
    if http_client is not None:
        await http_client.aclose()
    if registry_client is not None:
        await registry_client.close()
    admin = None
    verifier = None
    registry_client = None
    http_client = None


async def health_check() -> bool:
    if registry_client is None:
        return False
    return await registry_client.is_connected()
