import dataclasses

import pytest

from teecart.models import CartItem, CartPackage

STORED_ITEM = {
    "id": "course-1-2025-06-01T09:00:00-1748768400000",
    "courseId": "course-1",
    "courseName": "Los Naranjos",
    "date": "2025-06-01",
    "time": "2025-06-01T09:00:00",
    "players": 2,
    "package": {"id": 7, "name": "Greenfee + Buggy", "price": 95},
    "addOns": [{"id": 3, "name": "Trolley", "price": 5, "totalPrice": 10}],
    "totalPrice": 200,
    "providerType": "golfmanager",
}


def test_from_dict_reads_stored_camel_case():
    item = CartItem.from_dict(STORED_ITEM)

    assert item.course_id == "course-1"
    assert item.package == CartPackage(id=7, name="Greenfee + Buggy", price=95.0)
    assert item.add_ons[0].total_price == 10.0
    assert item.add_ons[0].quantity is None
    assert item.player_names is None
    assert item.key == ("course-1", "2025-06-01T09:00:00")


def test_to_dict_keeps_camel_case_keys():
    data = CartItem.from_dict(STORED_ITEM).to_dict()

    assert set(data) == {
        "id", "courseId", "courseName", "date", "time", "players",
        "package", "addOns", "totalPrice", "providerType",
    }
    assert data["package"]["includesBuggy"] is None


def test_round_trip_with_optional_fields():
    item = CartItem.from_dict({**STORED_ITEM, "playerNames": ["Ana", "Luis"]})

    assert CartItem.from_dict(item.to_dict()) == item


@pytest.mark.parametrize("players", [0, 5, "2", True, None])
def test_players_must_be_one_to_four(players):
    with pytest.raises(ValueError):
        CartItem.from_dict({**STORED_ITEM, "players": players})


def test_missing_required_field_raises_key_error():
    data = dict(STORED_ITEM)
    del data["courseId"]

    with pytest.raises(KeyError):
        CartItem.from_dict(data)


@pytest.mark.parametrize("names", ["Ana", ("Ana", "Luis"), ["Ana", 7]])
def test_player_names_must_be_a_list_of_strings(names):
    item = CartItem.from_dict(STORED_ITEM)

    with pytest.raises(ValueError):
        dataclasses.replace(item, player_names=names)


def test_course_name_must_be_a_string():
    item = CartItem.from_dict(STORED_ITEM)

    with pytest.raises(ValueError):
        dataclasses.replace(item, course_name=123)
