from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from discount_server.config import Settings
from discount_server.logic import DiscountService
from discount_server.main import create_app
from discount_server.storage import CodeStore


@pytest.fixture
def storage_path(tmp_path: Path) -> Path:
    return tmp_path / "Storage" / "test_discount_codes.json"


@pytest.fixture
def store(storage_path: Path) -> CodeStore:
    return CodeStore(storage_path)


@pytest.fixture
def service(store: CodeStore) -> DiscountService:
    return DiscountService(store)


@pytest.fixture
def client(storage_path: Path) -> Iterator[TestClient]:
    app = create_app(Settings(storage_path=str(storage_path)))
    with TestClient(app) as c:
        yield c
