import os

from dotenv import load_dotenv

from Passport_Retrieval.pr_shared.errors import ConfigurationError

load_dotenv()

# Registry (EVM JSON-RPC)

RPC_URL                     = os.getenv("RPC_URL", "http://localhost:8545")
CONTRACT_ADDRESS            = os.getenv("CONTRACT_ADDRESS", "")
REGISTRY_TIMEOUT_SECONDS    = float(os.getenv("REGISTRY_TIMEOUT_SECONDS", "10"))

# Storage network (IPFS HTTP gateways, tried in order)

DEFAULT_MIRRORS = [
    "https://gateway.pinata.cloud/ipfs",
    "https://ipfs.io/ipfs",
    "https://cloudflare-ipfs.com/ipfs",
]

PINATA_GATEWAY              = os.getenv("PINATA_GATEWAY", "")
GATEWAY_TIMEOUT_SECONDS     = float(os.getenv("GATEWAY_TIMEOUT_SECONDS", "15"))
GATEWAY_USER_AGENT          = "Mozilla/5.0"


def _parse_mirrors(raw: str) -> list[str]:
    mirrors = [m.strip() for m in raw.split(",") if m.strip()]
    if not mirrors:
        mirrors = list(DEFAULT_MIRRORS)
    if PINATA_GATEWAY and PINATA_GATEWAY not in mirrors:
        mirrors.insert(0, PINATA_GATEWAY)
    return mirrors


IPFS_MIRRORS = _parse_mirrors(os.getenv("IPFS_MIRRORS", ""))

# Decryption

COMMON_ENCRYPTION_PASSPHRASE = os.getenv("COMMON_ENCRYPTION_PASSPHRASE", "")

# Packed payload layout: nonce | tag | ciphertext

NONCE_SIZE  = 12
TAG_SIZE    = 16
HEADER_SIZE = NONCE_SIZE + TAG_SIZE     # 28
KEY_SIZE    = 32                        # AES-256

# Registry statuses (for validation)

VALID_STATUSES = {"Pending", "Approved", "Rejected"}

# HTTP surface

API_PREFIX  = os.getenv("API_PREFIX", "/api/passport")
LOG_LEVEL   = os.getenv("LOG_LEVEL", "INFO")


def require_passphrase(passphrase: str | None = None) -> str:
    """Return the shared passphrase or fail before any traffic is served."""
    value = COMMON_ENCRYPTION_PASSPHRASE if passphrase is None else passphrase
    if not value:
        raise ConfigurationError("COMMON_ENCRYPTION_PASSPHRASE not set")
    return value
