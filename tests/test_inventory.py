import pytest

from models.log import Log


def _item(**overrides):
    data = {
        "itemName": "Widget",
        "description": "Blue steel widget",
        "quantity": 10,
        "price": 2.5,
        "category": "Hardware",
        "supplier": "Acme",
    }
    data.update(overrides)
    return data


@pytest.fixture()
def stocked(alice):
    """alice with a small mixed inventory."""
    for payload in (
        _item(),
        _item(itemName="Gadget", description="Handheld", quantity=3, price=10.0, category="Electronics"),
        _item(itemName="Cable", description="USB widget cable", quantity=0, price=1.0, category="Electronics",
              lowStockAlert=2),
        _item(itemName="Bolt", description=None, quantity=100, price=0.1, supplier="Bolts Ltd"),
    ):
        r = alice.post("/inventory", json=payload)
        assert r.status_code == 201, r.text
    return alice


def _names(response):
    return [i["itemName"] for i in response.json()]


def test_inventory_requires_session(client):
    assert client.get("/inventory").status_code == 401
    assert client.post("/inventory", json=_item()).status_code == 401


def test_create_returns_item_with_defaults(alice):
    r = alice.post("/inventory", json=_item(itemName="  Widget  "))
    assert r.status_code == 201
    body = r.json()
    assert body["itemName"] == "Widget"
    assert body["lowStockAlert"] == 5
    assert body["quantity"] == 10
    assert body["price"] == 2.5
    assert body["userId"] == alice.get("/auth/me").json()["id"]
    assert body["dateAdded"] is not None


def test_create_rejects_duplicate_name_for_same_owner(alice):
    assert alice.post("/inventory", json=_item()).status_code == 201
    r = alice.post("/inventory", json=_item(quantity=1))
    assert r.status_code == 400
    assert r.json()["detail"] == "Item with this name already exists"


@pytest.mark.parametrize(
    "overrides",
    [
        {"quantity": -1},
        {"quantity": 2.5},
        {"price": -0.01},
        {"lowStockAlert": -3},
        {"category": ""},
        {"itemName": ""},
    ],
)
def test_create_validates_fields(alice, overrides):
    assert alice.post("/inventory", json=_item(**overrides)).status_code == 422


def test_owners_are_isolated(stocked, new_client, register_user):
    bob = new_client()
    assert register_user(bob, username="bob", email="bob@b.com").status_code == 201

    assert bob.get("/inventory").json() == []
    # Same item name is fine for a different owner
    assert bob.post("/inventory", json=_item()).status_code == 201

    alice_widget = stocked.get("/inventory").json()[0]
    assert bob.get(f"/inventory/{alice_widget['id']}").status_code == 404
    assert bob.put(f"/inventory/{alice_widget['id']}", json={"quantity": 0}).status_code == 404
    assert bob.delete(f"/inventory/{alice_widget['id']}").status_code == 404
    assert len(stocked.get("/inventory").json()) == 4


def test_list_and_get_one(stocked):
    items = stocked.get("/inventory").json()
    assert [i["itemName"] for i in items] == ["Widget", "Gadget", "Cable", "Bolt"]

    r = stocked.get(f"/inventory/{items[1]['id']}")
    assert r.status_code == 200
    assert r.json()["itemName"] == "Gadget"

    r = stocked.get("/inventory/9999")
    assert r.status_code == 404
    assert r.json()["detail"] == "Item not found"


def test_search_matches_name_or_description_case_insensitively(stocked):
    r = stocked.get("/inventory/search", params={"query": "WIDGET"})
    assert r.status_code == 200
    assert sorted(_names(r)) == ["Cable", "Widget"]


def test_search_treats_wildcards_literally(stocked):
    for term in ("%", "_"):
        r = stocked.get("/inventory/search", params={"query": term})
        assert r.status_code == 200
        assert _names(r) == []

    assert stocked.post("/inventory", json=_item(itemName="50% Off Tag", description="a_b")).status_code == 201
    assert _names(stocked.get("/inventory/search", params={"query": "%"})) == ["50% Off Tag"]
    assert _names(stocked.get("/inventory/search", params={"query": "_"})) == ["50% Off Tag"]


def test_search_filters_category_and_sorts(stocked):
    r = stocked.get("/inventory/search", params={"category": "Electronics", "sortBy": "price", "sortOrder": "desc"})
    assert _names(r) == ["Gadget", "Cable"]

    r = stocked.get("/inventory/search", params={"sortBy": "quantity"})
    assert _names(r) == ["Cable", "Gadget", "Widget", "Bolt"]


def test_search_rejects_unknown_sort_field(stocked):
    r = stocked.get("/inventory/search", params={"sortBy": "password_hash"})
    assert r.status_code == 400


def test_low_stock_uses_each_items_threshold(stocked):
    r = stocked.get("/inventory/low-stock")
    assert r.status_code == 200
    # Cable: 0 <= 2, Gadget: 3 <= 5; Widget (10) and Bolt (100) are fine
    assert _names(r) == ["Cable", "Gadget"]


def test_update_is_partial(stocked):
    widget = stocked.get("/inventory").json()[0]
    r = stocked.put(f"/inventory/{widget['id']}", json={"quantity": 4, "lowStockAlert": 4})
    assert r.status_code == 200
    body = r.json()
    assert body["quantity"] == 4
    assert body["lowStockAlert"] == 4
    assert body["price"] == widget["price"]
    assert body["supplier"] == widget["supplier"]

    assert "Widget" in _names(stocked.get("/inventory/low-stock"))


def test_update_rejects_duplicate_name_and_nulls(stocked):
    widget = stocked.get("/inventory").json()[0]
    r = stocked.put(f"/inventory/{widget['id']}", json={"itemName": "Gadget"})
    assert r.status_code == 400

    r = stocked.put(f"/inventory/{widget['id']}", json={"price": None})
    assert r.status_code == 400

    r = stocked.put(f"/inventory/{widget['id']}", json={"quantity": -5})
    assert r.status_code == 422

    # Renaming to its own name is not a conflict
    r = stocked.put(f"/inventory/{widget['id']}", json={"itemName": "Widget", "description": None})
    assert r.status_code == 200
    assert r.json()["description"] is None


def test_delete(stocked, db_session):
    widget = stocked.get("/inventory").json()[0]
    r = stocked.delete(f"/inventory/{widget['id']}")
    assert r.status_code == 200
    assert r.json() == {"message": "Item deleted successfully"}
    assert stocked.get(f"/inventory/{widget['id']}").status_code == 404
    assert stocked.delete(f"/inventory/{widget['id']}").status_code == 404

    assert db_session.query(Log).filter(Log.action == "ITEM_DELETE").count() == 1


def test_stats_summarise_inventory(stocked):
    r = stocked.get("/inventory/stats")
    assert r.status_code == 200
    body = r.json()
    assert body["totalItems"] == 4
    # 10*2.5 + 3*10 + 0*1 + 100*0.1
    assert body["totalValue"] == pytest.approx(65.0)
    assert body["lowStockCount"] == 2
    assert body["outOfStockCount"] == 1
    assert body["categories"] == [
        {"category": "Hardware", "quantity": 110, "value": pytest.approx(35.0)},
        {"category": "Electronics", "quantity": 3, "value": pytest.approx(30.0)},
    ]


def test_stats_for_empty_inventory(alice):
    body = alice.get("/inventory/stats").json()
    assert body == {
        "totalItems": 0,
        "totalValue": 0.0,
        "lowStockCount": 0,
        "outOfStockCount": 0,
        "categories": [],
    }
