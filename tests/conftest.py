from __future__ import annotations

import pytest

from blobstore.common import config
from blobstore.common.config import Settings, get_settings
from tests.services.mock_storage import MockStorageClient

BUCKET = "test-bucket"


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "ENV_FILE", tmp_path / ".env")
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        S3_ENDPOINT="localhost:9000",
        S3_SECURE=False,
        S3_ACCESS_KEY="test-key",
        S3_SECRET_KEY="test-secret",
        S3_BUCKET=BUCKET,
        S3_REGION="us-east-1",
        S3_OBJECT_PREFIX="blobs/",
    )


@pytest.fixture()
def mock_storage() -> MockStorageClient:
    return MockStorageClient()
