import pytest

from orderflow.models.product_model import DuplicateProductCodeError


def test_duplicate_code_is_rejected_and_not_stored(products):
    products.create({"name": "Plain Cake", "price": 10})
    products.create({"name": "Bread", "price": 3})
    products.create({"name": "Chocolate Cake", "price": 20, "code": "A1"})

    with pytest.raises(DuplicateProductCodeError) as excinfo:
        products.create({"name": "Vanilla Cake", "price": 18, "code": "A1"})

    assert excinfo.value.code == "A1"
    names = [p["name"] for p in products.list()]
    assert len(names) == 3
    assert "Vanilla Cake" not in names


def test_products_without_code_do_not_collide(products):
    products.create({"name": "One", "price": 1})
    products.create({"name": "Two", "price": 2, "code": "  "})
    assert products.count() == 2


def test_update_to_colliding_code_leaves_product_unchanged(products):
    products.create({"name": "Cake", "price": 20, "code": "A1"})
    bread = products.create({"name": "Bread", "price": 3, "code": "B1"})

    with pytest.raises(DuplicateProductCodeError):
        products.update(bread["_id"], code="A1", price=5)

    stored = products.get_by_id(bread["_id"])
    assert stored["code"] == "B1"
    assert stored["price"] == 3


def test_update_may_keep_its_own_code(products):
    cake = products.create({"name": "Cake", "price": 20, "code": "A1"})
    assert products.update(cake["_id"], code="A1", price=22)
    assert products.get_by_id(cake["_id"])["price"] == 22


def test_negative_price_is_rejected(products):
    with pytest.raises(ValueError):
        products.create({"name": "Cake", "price": -1})
    with pytest.raises(ValueError):
        products.create({"name": "", "price": 1})
    assert products.count() == 0


def test_create_with_explicit_id_merges(products):
    products.create({"_id": "p-1", "name": "Cake", "price": 20, "details": "Round"})
    merged = products.create({"_id": "p-1", "name": "Cake", "price": 25})

    assert merged["_id"] == "p-1"
    assert merged["price"] == 25
    assert merged["details"] == "Round"
    assert products.count() == 1


def test_code_is_trimmed(products):
    product = products.create({"name": "Cake", "price": 20, "code": " A1 "})
    assert product["code"] == "A1"
    with pytest.raises(DuplicateProductCodeError):
        products.create({"name": "Other", "price": 1, "code": "A1"})
