"""
FastAPI endpoints for passport retrieval.

    GET /admin/{lookup_key}   permissive predicate, full decrypted record
    GET /decrypt/{cid}        direct CID decrypt, no registry, no cache
    GET /verify/{lookup_key}  approved-only, allow-listed fields

Errors cross the boundary as a coarse status code plus an opaque message.
The underlying cause is logged by the pipeline, never returned.
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Path
from pydantic import BaseModel, Field

from Passport_Retrieval.pr_server import runtime
from Passport_Retrieval.pr_server.pipeline import RetrievalPipeline
from Passport_Retrieval.pr_shared import config
from Passport_Retrieval.pr_shared.errors import (
    DecryptionError,
    FetchExhaustedError,
    NotFoundError,
    RetrievalFailedError,
)
from Passport_Retrieval.pr_shared.types import JsonScalar


# ── Pydantic response models ──


class AdminRecordResponse(BaseModel):
    lookup_key: str = Field(serialization_alias="lookupKey")
    cid: str
    decrypted_record: Any = Field(serialization_alias="decryptedRecord")


class DecryptResponse(BaseModel):
    cid: str
    decrypted_record: Any = Field(serialization_alias="decryptedRecord")


class VerifyResponse(BaseModel):
    name: Optional[JsonScalar] = None
    nationality: Optional[JsonScalar] = None
    issued_on: Optional[JsonScalar] = Field(default=None, serialization_alias="issuedOn")
    status: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    registry_connected: bool
    mirrors: int
    cached_admin: int
    cached_verify: int


# ── App lifecycle ──


@asynccontextmanager
async def lifespan(app: FastAPI):
    await runtime.create_runtime()
    yield
    await runtime.close_runtime()


app = FastAPI(title="Passport Retrieval", version="1.0.0", lifespan=lifespan)
router = APIRouter(prefix=config.API_PREFIX)

CID_PATTERN = r"^[A-Za-z0-9]+$"


def _get_admin() -> RetrievalPipeline:
    if runtime.admin is None:
        raise HTTPException(status_code=503, detail="Runtime not initialized")
    return runtime.admin


def _get_verifier() -> RetrievalPipeline:
    if runtime.verifier is None:
        raise HTTPException(status_code=503, detail="Runtime not initialized")
    return runtime.verifier


def _failure_detail(e: RetrievalFailedError) -> str:
    if isinstance(e.cause, DecryptionError):
        return DecryptionError.public_message
    if isinstance(e.cause, FetchExhaustedError):
        return "Storage network unavailable"
    return "Registry unavailable"


# ── Endpoints ──


@router.get("/admin/{lookup_key}", response_model=AdminRecordResponse)
async def admin_record(lookup_key: str):
    pipeline = _get_admin()
    try:
        result = await pipeline.retrieve(lookup_key)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Application not found on registry")
    except RetrievalFailedError as e:
        raise HTTPException(status_code=500, detail=_failure_detail(e))

    return AdminRecordResponse(
        lookup_key=result.lookup_key,
        cid=result.cid,
        decrypted_record=result.record,
    )


@router.get("/decrypt/{cid}", response_model=DecryptResponse)
async def decrypt_cid(cid: str = Path(..., pattern=CID_PATTERN)):
    pipeline = _get_admin()
    try:
        decrypted = await pipeline.decrypt_cid(cid)
    except RetrievalFailedError as e:
        raise HTTPException(status_code=500, detail=_failure_detail(e))

    return DecryptResponse(cid=cid, decrypted_record=decrypted)


@router.get("/verify/{lookup_key}", response_model=VerifyResponse)
async def verify_passport(lookup_key: str):
    pipeline = _get_verifier()
    try:
        v = await pipeline.verify(lookup_key)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Passport not found")
    except RetrievalFailedError:
        raise HTTPException(status_code=500, detail="Verification failed")

    return VerifyResponse(
        name=v.name,
        nationality=v.nationality,
        issued_on=v.issued_on,
        status=v.status,
    )


app.include_router(router)


@app.get("/api/health", response_model=HealthResponse)
async def health():
    connected = await runtime.health_check()
    mirrors = len(runtime.admin.fetcher.mirrors) if runtime.admin is not None else 0
    return HealthResponse(
        status="ok" if connected else "degraded",
        registry_connected=connected,
        mirrors=mirrors,
        cached_admin=len(runtime.admin.cache) if runtime.admin is not None else 0,
        cached_verify=len(runtime.verifier.cache) if runtime.verifier is not None else 0,
    )
