import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest

# Settings are read at import time, so point the app at a throwaway database first.
_DB_DIR = Path(tempfile.mkdtemp(prefix="codecase-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'api.db'}"
os.environ["HINT_COST"] = "3"
os.environ["STARTING_HINTS"] = "2"

from fastapi.testclient import TestClient  # noqa: E402

from codecase.services.content_loader import ContentCatalog, load_catalog  # noqa: E402


@pytest.fixture(scope="session")
def catalog() -> ContentCatalog:
    return load_catalog()


@pytest.fixture
def user_id() -> str:
    return f"user-{uuid4()}"


@pytest.fixture(scope="module")
def client() -> Iterator[TestClient]:
    from codecase.main import app

    with TestClient(app) as test_client:
        yield test_client
