from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from Passport_Retrieval.pr_shared.errors import UnrecognizedStatusError


class RegistryStatus(str, Enum):
    PENDING  = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["RegistryStatus"]:
        """Blank means no status yet; anything else must be a known value."""
        if raw is None or not str(raw).strip():
            return None
        try:
            return cls(str(raw).strip())
        except ValueError:
            raise UnrecognizedStatusError(raw)


@dataclass(frozen=True)
class RegistryRecord:
    lookup_key:     str
    owner_address:  str
    status:         Optional[RegistryStatus]
    pointer_url:    str
    cid:            str
    created_at:     int
    updated_at:     int

    @classmethod
    def from_tuple(cls, raw) -> "RegistryRecord":
        lookup_key, owner, status, pointer_url, cid, created_at, updated_at = raw
        return cls(
            lookup_key=lookup_key or "",
            owner_address=owner or "",
            status=RegistryStatus.parse(status),
            pointer_url=pointer_url or "",
            cid=(cid or "").strip(),
            created_at=int(created_at or 0),
            updated_at=int(updated_at or 0),
        )


@dataclass(frozen=True)
class PackedPayload:
    nonce:      bytes
    tag:        bytes
    ciphertext: bytes


@dataclass(frozen=True)
class RetrievalResult:
    lookup_key: str
    cid:        str
    status:     Optional[RegistryStatus]
    record:     Any


JsonScalar = Union[str, int, float, bool]


@dataclass(frozen=True)
class VerificationResult:
    name:        Optional[JsonScalar]
    nationality: Optional[JsonScalar]
    issued_on:   Optional[JsonScalar]
    status:      Optional[str]


@dataclass(frozen=True)
class MirrorAttempt:
    url:         str
    status_code: Optional[int]
    error:       str
