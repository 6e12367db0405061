"""
IPFS gateway fetch with ordered mirror fallback.

Mirrors are tried one at a time, in configured order, one shot each.  The
first 2xx response wins; anything else (non-2xx, DNS failure, timeout,
connection reset) is recorded and the next mirror is tried.  When every
mirror fails, FetchExhaustedError carries all attempts plus the last error.
"""

from typing import Optional

import httpx

from Passport_Retrieval.pr_shared import config
from Passport_Retrieval.pr_shared.errors import FetchExhaustedError
from Passport_Retrieval.pr_shared.logger import get_logger
from Passport_Retrieval.pr_shared.types import MirrorAttempt

log = get_logger("passport.gateway")


def mirror_url(mirror: str, cid: str) -> str:
    return f"{mirror.rstrip('/')}/{cid}"


class GatewayFetcher:
    """Fetches encrypted blobs by CID over a shared httpx.AsyncClient."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        mirrors: Optional[list[str]] = None,
        timeout: float = config.GATEWAY_TIMEOUT_SECONDS,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)
        self.mirrors = list(mirrors) if mirrors is not None else list(config.IPFS_MIRRORS)
        self.timeout = timeout

    async def fetch_bytes(self, cid: str, mirrors: Optional[list[str]] = None) -> bytes:
        targets = self.mirrors if mirrors is None else list(mirrors)
        attempts: list[MirrorAttempt] = []
        last_error: Optional[str] = None

        for mirror in targets:
            url = mirror_url(mirror, cid)
            try:
                resp = await self._client.get(
                    url,
                    headers={"User-Agent": config.GATEWAY_USER_AGENT},
                    timeout=self.timeout,
                )
            except httpx.HTTPError as e:
                last_error = f"{type(e).__name__}: {e}"
                attempts.append(MirrorAttempt(url=url, status_code=None, error=last_error))
                log.warning(f"[GATEWAY] {url} transport error {type(e).__name__}")
                continue

            if not resp.is_success:
                last_error = f"HTTP {resp.status_code}"
                attempts.append(MirrorAttempt(url=url, status_code=resp.status_code, error=last_error))
                log.warning(f"[GATEWAY] {url} returned {resp.status_code}")
                continue

            log.info(f"[GATEWAY] {url} ok ({len(resp.content)} bytes)")
            return resp.content

        log.error(f"[GATEWAY] all {len(attempts)} mirrors failed for cid={cid}")
        raise FetchExhaustedError(cid, attempts, last_error or "no mirrors configured")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
