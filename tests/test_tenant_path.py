import pytest

from orderflow.models.order_model import OrderModel
from orderflow.utils.tenant_path import (
    StoragePathError,
    collection_path,
    root_path,
    root_path_for_profile,
    sanitize,
)


def test_sanitize_keeps_only_ascii_alphanumerics():
    assert sanitize("Cake & Co. (Dhaka)") == "CakeCoDhaka"
    assert sanitize(None) == ""


def test_root_path_joins_sanitized_name_and_email():
    assert root_path("Cake House", "owner@example.com") == "CakeHouse_ownerexamplecom"


def test_root_path_collapses_punctuation_variants():
    assert root_path("Cake-House", "a@b.com") == root_path("Cake House!", "a@b.com")


def test_collection_path_nests_under_business_accounts():
    assert collection_path("CakeHouse_ownerexamplecom", "orders") == "BusinessAccounts.CakeHouse_ownerexamplecom.orders"


def test_profile_without_business_name_has_no_path():
    with pytest.raises(StoragePathError):
        root_path_for_profile({"email": "owner@example.com"})
    with pytest.raises(StoragePathError):
        root_path_for_profile(None)


def test_stored_tenant_path_wins_over_current_name():
    profile = {"business_name": "Renamed Bakery", "email": "owner@example.com", "tenant_path": "CakeHouse_ownerexamplecom"}
    assert root_path_for_profile(profile) == "CakeHouse_ownerexamplecom"


def test_registry_for_profile_uses_tenant_collection(database):
    profile = {"uid": "owner-1", "business_name": "Cake House", "email": "owner@example.com"}
    orders = OrderModel.for_profile(database, profile)

    assert orders.owner_id == "owner-1"
    assert orders.collection.name == "BusinessAccounts.CakeHouse_ownerexamplecom.orders"


def test_registry_for_profile_requires_path(database):
    with pytest.raises(StoragePathError):
        OrderModel.for_profile(database, {"uid": "owner-1", "email": "owner@example.com"})


def test_profile_awaiting_onboarding_has_no_path():
    profile = {"business_name": "Cake House", "email": "owner@example.com", "onboarding_required": True}

    with pytest.raises(StoragePathError):
        root_path_for_profile(profile)
