import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from cart.handlers import router
from cart.persistence import DEFAULT_STORAGE_KEY, SyncState
from cart.provider import CartProvider
from cart.schemas import dump_snapshot, load_snapshot
from core.ioc import Resolve
from core.services.exceptions import SnapshotDecodeError
from gateways.exceptions import StorageUnavailableError
from gateways.memory import InMemoryStorage
from main import app_factory
from tests.utils import make_line_item

PREFIX = f"/api/v1{router.prefix}"


def _product(id: str, price: float = 10) -> dict:
    return {
        "id": id,
        "title": f"Product {id}",
        "image_url": f"https://cdn.example.com/{id}.png",
        "price": price,
    }


def _quantities(data: list[dict]) -> list[tuple[str, int]]:
    return [(item["id"], item["quantity"]) for item in data]


def test_ping(client: TestClient):
    resp = client.get("/ping")
    assert resp.status_code == 200
    assert resp.json()["status"] == "available"


def test_empty_cart(client: TestClient):
    resp = client.get(f"{PREFIX}/")
    assert resp.status_code == 200
    assert resp.json() == []


def test_add_to_cart(client: TestClient):
    resp = client.post(f"{PREFIX}/add", json=_product("A"))
    assert resp.status_code == 200
    assert resp.json() == [{**_product("A"), "quantity": 1}]


@pytest.mark.parametrize(
    "data",
    [
        {"id": "A", "title": "Shoe"},
        {**_product("A"), "price": "free"},
    ],
)
def test_add_to_cart_invalid_body(client: TestClient, data: dict):
    resp = client.post(f"{PREFIX}/add", json=data)
    assert resp.status_code == 422


def test_increment_decrement(client: TestClient):
    client.post(f"{PREFIX}/add", json=_product("A"))
    client.post(f"{PREFIX}/add", json=_product("B"))
    resp = client.post(f"{PREFIX}/increment/A")
    assert _quantities(resp.json()) == [("A", 2), ("B", 1)]
    resp = client.post(f"{PREFIX}/decrement/B")
    assert _quantities(resp.json()) == [("A", 2)]
    resp = client.post(f"{PREFIX}/decrement/missing")
    assert resp.status_code == 200
    assert _quantities(resp.json()) == [("A", 2)]


def test_summary(client: TestClient):
    client.post(f"{PREFIX}/add", json=_product("A", price=2.5))
    client.post(f"{PREFIX}/increment/A")
    client.post(f"{PREFIX}/add", json=_product("B", price=1))
    resp = client.get(f"{PREFIX}/summary")
    assert resp.status_code == 200
    assert resp.json() == {"items_count": 2, "total_quantity": 3, "total_price": 6.0}


def test_cart_is_loaded_and_persisted(storage: InMemoryStorage):
    snapshot = (make_line_item("A", 3),)
    asyncio.run(storage.set(DEFAULT_STORAGE_KEY, dump_snapshot(snapshot)))
    with TestClient(app_factory()) as client:
        resp = client.get(f"{PREFIX}/")
        assert _quantities(resp.json()) == [("A", 3)]
        client.post(f"{PREFIX}/decrement/A")
    persisted = load_snapshot(storage.dump()[DEFAULT_STORAGE_KEY])
    assert [(p.id, p.quantity) for p in persisted] == [("A", 2)]


def test_cart_unavailable_without_lifespan(storage: InMemoryStorage):
    client = TestClient(app_factory())
    resp = client.get(f"{PREFIX}/")
    assert resp.status_code == 503
    assert resp.json() == {"detail": "use_cart must be used within a CartProvider"}


def test_app_reuses_container_cart_provider():
    app = app_factory()
    assert app.state.cart_provider is Resolve(CartProvider)


def test_storage_down_at_startup_serves_empty_cart(
    storage: InMemoryStorage, monkeypatch: pytest.MonkeyPatch
):
    down = StorageUnavailableError("connection refused")
    monkeypatch.setattr(storage, "ping", AsyncMock(side_effect=down))
    monkeypatch.setattr(storage, "get", AsyncMock(side_effect=down))
    with TestClient(app_factory()) as client:
        resp = client.get(f"{PREFIX}/")
        assert resp.status_code == 200
        assert resp.json() == []


def test_storage_is_closed_when_cart_fails_to_load(
    storage: InMemoryStorage, monkeypatch: pytest.MonkeyPatch
):
    asyncio.run(storage.set(DEFAULT_STORAGE_KEY, "not a json"))
    aclose = AsyncMock()
    monkeypatch.setattr(storage, "aclose", aclose)
    with pytest.raises(SnapshotDecodeError):
        with TestClient(app_factory()):
            ...
    aclose.assert_awaited_once()
    assert Resolve(CartProvider).synchronizer.state == SyncState.CLOSED


def test_cors_headers_for_allowed_origin(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text(
        "mode: tests\nserver:\n  allow_origins:\n    - http://localhost:3000\n"
    )
    monkeypatch.setenv("CONFIG_PATH", str(cfg_path))
    with TestClient(app_factory()) as client:
        resp = client.get(f"{PREFIX}/", headers={"Origin": "http://localhost:3000"})
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_no_cors_headers_without_allowed_origins(client: TestClient):
    resp = client.get(f"{PREFIX}/", headers={"Origin": "http://localhost:3000"})
    assert resp.status_code == 200
    assert "access-control-allow-origin" not in resp.headers
