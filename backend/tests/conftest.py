import sys
from pathlib import Path

import pytest

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from db import Base  # noqa: E402
from domain.errors import AssetStoreError  # noqa: E402
from domain.models import StoredAsset  # noqa: E402
from storage.asset_store import AssetStore  # noqa: E402


class FakeAssetStore(AssetStore):
    """Records calls; hands out https://cdn/<n> URLs unless a fixed URL is given."""

    def __init__(self, url=None, fail_uploads=(), fail_removals=()):
        self.url = url
        self.fail_uploads = set(fail_uploads)
        self.fail_removals = set(fail_removals)
        self.calls = []
        self._counter = 0

    def upload(self, local_path, folder=None):
        self.calls.append(("upload", local_path))
        if local_path in self.fail_uploads:
            raise AssetStoreError(f"cannot upload {local_path}")
        self._counter += 1
        return StoredAsset(public_url=self.url or f"https://cdn/{self._counter}")

    def remove(self, public_url):
        self.calls.append(("remove", public_url))
        if public_url in self.fail_removals:
            raise AssetStoreError(f"cannot remove {public_url}")

    def ops(self, kind):
        return [arg for op, arg in self.calls if op == kind]


@pytest.fixture
def fake_store():
    return FakeAssetStore()


@pytest.fixture
def session_factory():
    """In-memory SQLite shared across connections of one test."""
    from repositories import models  # noqa: F401  Ensures models are registered

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    yield factory
    engine.dispose()
