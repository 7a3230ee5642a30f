import threading

import pytest

from orderflow.models.account_model import AccountModel
from orderflow.models.plan_model import PlanModel
from orderflow.services.profile_resolver import ProfileResolver


@pytest.fixture
def accounts(database):
    return AccountModel(database)


@pytest.fixture
def signed_out():
    return []


@pytest.fixture
def resolver(database, signed_out):
    return ProfileResolver(database, on_sign_out=signed_out.append)


def test_admin_profile_is_account_record(accounts, resolver):
    admin = accounts.create("admin@example.com", "secret123", role="admin")

    profile = resolver.resolve(admin["_id"])

    assert profile["uid"] == admin["_id"]
    assert profile["role"] == "admin"
    assert "password" not in profile
    assert "capabilities" not in profile


def test_business_without_record_needs_onboarding(accounts, resolver):
    account = accounts.create("owner@example.com", "secret123", "Cake House")

    profile = resolver.resolve(account["_id"])

    assert profile["onboarding_required"] is True
    assert profile["capabilities"]["can_add_order"] is False
    assert profile["capabilities"]["max_order_number"] == 0
    assert "tenant_path" not in profile


def test_register_business_merges_records(accounts, resolver):
    account = accounts.create("owner@example.com", "secret123", "Cake House")

    profile = resolver.register_business(account["_id"], "owner@example.com", "Cake House", "01711000000", user_name="Rina")

    assert profile["onboarding_required"] is False
    assert profile["tenant_path"] == "CakeHouse_ownerexamplecom"
    assert profile["business_plan"]["name"] == "Lite"
    assert profile["user_name"] == "Rina"
    assert profile["uid"] == account["_id"]
    assert profile["email"] == "owner@example.com"


def test_account_toggle_overrides_plan_order_flag(accounts, resolver):
    account = accounts.create("owner@example.com", "secret123", "Cake House")
    resolver.register_business(account["_id"], "owner@example.com", "Cake House", "01711000000")

    assert resolver.resolve(account["_id"])["capabilities"]["can_add_order"] is False

    accounts.update(account["_id"], can_create_orders=True)
    profile = resolver.resolve(account["_id"])
    assert profile["capabilities"]["can_add_order"] is True
    assert profile["capabilities"]["can_add_customer"] is True


def test_disabled_account_is_signed_out(accounts, resolver, signed_out):
    account = accounts.create("owner@example.com", "secret123", "Cake House")
    accounts.update(account["_id"], status="disabled")

    assert resolver.resolve(account["_id"]) is None
    assert signed_out == [account["_id"]]


def test_unknown_uid(resolver):
    assert resolver.resolve("missing") is None


def test_tenant_path_collision_is_refused(accounts, resolver):
    first = accounts.create("owner@example.com", "secret123")
    resolver.register_business(first["_id"], "owner@example.com", "Cake House", "01711000000")

    # a stored path that a second business would also derive
    resolver.businesses.collection.update_one(
        {"_id": "owner@example.com"}, {"$set": {"tenant_path": "CakeHouse_otherexamplecom"}}
    )
    second = accounts.create("other@example.com", "secret123")
    with pytest.raises(ValueError):
        resolver.register_business(second["_id"], "other@example.com", "Cake-House", "01711000001")


def test_register_twice_is_refused(accounts, resolver):
    account = accounts.create("owner@example.com", "secret123")
    resolver.register_business(account["_id"], "owner@example.com", "Cake House", "01711000000")
    with pytest.raises(ValueError):
        resolver.register_business(account["_id"], "owner@example.com", "Cake House", "01711000000")


def test_rename_keeps_tenant_path(accounts, resolver):
    account = accounts.create("owner@example.com", "secret123")
    resolver.register_business(account["_id"], "owner@example.com", "Cake House", "01711000000")

    profile = resolver.update_business_info(account["_id"], {"business_name": "Sweet Treats"})

    assert profile["business_name"] == "Sweet Treats"
    assert profile["tenant_path"] == "CakeHouse_ownerexamplecom"


def test_change_plan_copies_plan(database, accounts, resolver):
    account = accounts.create("owner@example.com", "secret123")
    resolver.register_business(account["_id"], "owner@example.com", "Cake House", "01711000000")
    gold = PlanModel(database).get_by_name("Gold")

    profile = resolver.change_plan(account["_id"], gold["_id"])

    assert profile["business_plan"]["name"] == "Gold"
    assert profile["capabilities"]["has_export_import_option"] is True
    assert resolver.change_plan(account["_id"], "missing") is None


def test_watch_pushes_profile_on_change(accounts, resolver):
    account = accounts.create("owner@example.com", "secret123", "Cake House")
    resolver.register_business(account["_id"], "owner@example.com", "Cake House", "01711000000")

    received = []
    changed = threading.Event()

    def on_profile(profile):
        received.append(profile)
        if profile and profile["capabilities"]["can_add_order"]:
            changed.set()

    cancel = resolver.watch(account["_id"], on_profile)
    try:
        assert received[0]["capabilities"]["can_add_order"] is False
        accounts.update(account["_id"], can_create_orders=True)
        assert changed.wait(timeout=5)
    finally:
        cancel()


def test_watch_unknown_uid_yields_none(resolver):
    received = []
    resolver.watch("missing", received.append)
    assert received == [None]
