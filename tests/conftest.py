import os
from collections.abc import Iterator
from pathlib import Path

os.environ["MODE"] = "tests"
os.environ.setdefault(
    "CONFIG_PATH", str(Path(__file__).parent.parent / "config" / "tests.yaml")
)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from cart.domain.interfaces import KeyValueStorageI  # noqa: E402
from core.ioc import Resolve, cleanup_list, get_container  # noqa: E402
from gateways.memory import InMemoryStorage  # noqa: E402
from main import app_factory  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_container() -> Iterator[None]:
    # cart provider is a container singleton and can't be started twice
    get_container.cache_clear()
    cleanup_list.clear()
    yield
    get_container.cache_clear()
    cleanup_list.clear()


@pytest.fixture
def storage() -> InMemoryStorage:
    storage = Resolve(KeyValueStorageI)
    assert isinstance(storage, InMemoryStorage)
    return storage


@pytest.fixture
def client(storage: InMemoryStorage) -> Iterator[TestClient]:
    with TestClient(app_factory()) as client:
        yield client
