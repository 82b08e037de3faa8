import json

import pytest

from teecart.cart import BookingCart
from teecart.storage import FileCartStorage, MemoryCartStorage, atomic_write_json, read_json


def test_atomic_write_then_read(tmp_path):
    path = str(tmp_path / "data.json")

    atomic_write_json(path, [{"a": 1}])

    assert read_json(path) == [{"a": 1}]
    assert not (tmp_path / "data.json.tmp").exists()


def test_read_missing_file(tmp_path):
    assert read_json(str(tmp_path / "missing.json")) is None


def test_file_storage_creates_directory(tmp_path):
    storage = FileCartStorage(str(tmp_path / "carts"))

    storage.save("cart-abc", [])

    assert (tmp_path / "carts" / "cart-abc.json").exists()
    assert storage.load("cart-abc") == []
    assert storage.load("other") is None


def test_file_storage_keys_cannot_escape_directory(tmp_path):
    storage = FileCartStorage(str(tmp_path))

    assert storage.path_for("../../etc/passwd").startswith(str(tmp_path))
    with pytest.raises(ValueError):
        storage.path_for("..")


def test_corrupt_file_raises(tmp_path):
    (tmp_path / "k.json").write_text("{oops")

    with pytest.raises(ValueError):
        FileCartStorage(str(tmp_path)).load("k")


def test_cart_survives_reload_from_disk(tmp_path, make_item, buggy_addon):
    storage = FileCartStorage(str(tmp_path))
    cart = BookingCart(storage, key="visitor")
    cart.add_item(make_item("A", "2025-06-01T08:00:00", add_ons=[buggy_addon]))
    cart.add_item(make_item("B", "2025-06-01T14:00:00"))

    reloaded = BookingCart(FileCartStorage(str(tmp_path)), key="visitor")

    assert reloaded.items == cart.items


def test_cart_with_corrupt_file_starts_empty(tmp_path, make_item):
    (tmp_path / "visitor.json").write_text("[{]")

    cart = BookingCart(FileCartStorage(str(tmp_path)), key="visitor")
    assert cart.items == []

    cart.add_item(make_item())
    assert len(json.loads((tmp_path / "visitor.json").read_text())) == 1


def test_memory_storage_keeps_json_text():
    storage = MemoryCartStorage()

    storage.save("k", [{"x": 1}])

    assert storage.values["k"] == '[{"x": 1}]'
    assert storage.load("k") == [{"x": 1}]
    assert storage.load("missing") is None
