import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

import mongomock
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from pinvault.app import create_app
from pinvault.context import VaultContext
from pinvault.infra.db import MongoHandle
from pinvault.infra.files_repo import FilesRepo
from pinvault.infra.password_repo import PasswordRepo
from pinvault.infra.storage import ObjectStorage
from pinvault.settings import Settings

BUCKET = "vault-test"


class FakeClock:
    """Callable clock returning milliseconds since epoch; advance it by hand."""

    def __init__(self, start_ms: float = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, *, seconds: float = 0, ms: float = 0) -> None:
        self.now += seconds * 1000 + ms


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        mongodb_uri="mongodb://localhost:27017/vault",
        db_name="vault_test",
        aws_region="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        aws_bucket_name=BUCKET,
        session_secret="test-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture()
def mongo(settings) -> MongoHandle:
    return MongoHandle(
        settings.mongodb_uri,
        db_name=settings.db_name,
        client_factory=lambda uri, **kw: mongomock.MongoClient(),
    )


@pytest.fixture()
def password_repo(mongo) -> PasswordRepo:
    return PasswordRepo(mongo)


@pytest.fixture()
def files_repo(mongo) -> FilesRepo:
    return FilesRepo(mongo)


@pytest.fixture()
def storage(settings, monkeypatch):
    # keep boto3 away from any real credentials on the machine
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    with mock_aws():
        s = ObjectStorage.from_settings(settings)
        s.client.create_bucket(Bucket=BUCKET)
        yield s


@pytest.fixture()
def context(settings, mongo, storage) -> VaultContext:
    return VaultContext(settings, mongo=mongo, storage=storage)


@pytest.fixture()
def client(context) -> TestClient:
    return TestClient(create_app(context=context))


@pytest.fixture()
def auth_headers(context) -> dict:
    return {"Authorization": f"Bearer {context.codec.issue()}"}
