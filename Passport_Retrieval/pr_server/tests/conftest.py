import pytest

from Passport_Retrieval.pr_chain.registry import RegistryResolver
from Passport_Retrieval.pr_server.cache import RetrievalCache
from Passport_Retrieval.pr_server.pipeline import admin_pipeline, verification_pipeline
from Passport_Retrieval.pr_shared.codec import PayloadCodec
from Passport_Retrieval.pr_storage.gateway import GatewayFetcher


@pytest.fixture
def codec(passphrase):
    return PayloadCodec(passphrase)


@pytest.fixture
def fetcher(http_client, mirrors):
    return GatewayFetcher(http_client, mirrors=mirrors)


@pytest.fixture
def resolver(fake_registry):
    return RegistryResolver(fake_registry)


@pytest.fixture
def admin_cache():
    return RetrievalCache()


@pytest.fixture
def verify_cache():
    return RetrievalCache()


@pytest.fixture
def admin(resolver, fetcher, codec, admin_cache):
    return admin_pipeline(resolver, fetcher, codec, admin_cache)


@pytest.fixture
def verifier(resolver, fetcher, codec, verify_cache):
    return verification_pipeline(resolver, fetcher, codec, verify_cache)
