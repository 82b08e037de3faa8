"""
Cart value objects.

Items are stored as JSON using the camelCase keys the storefront has always
written, so carts saved by older clients still load:

    {
        "id": "course-1-2025-06-01T09:00:00-1748768400000",
        "courseId": "course-1",
        "courseName": "Los Naranjos",
        "date": "2025-06-01",
        "time": "2025-06-01T09:00:00",
        "players": 2,
        "package": {"id": 7, "name": "Greenfee + Buggy", "price": 95.0,
                    "includesBuggy": true, "includesLunch": false},
        "addOns": [{"id": 3, "name": "Trolley", "price": 5.0,
                    "quantity": 2, "totalPrice": 10.0}],
        "totalPrice": 200.0,
        "providerType": "golfmanager"
    }
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from teecart.config import MAX_PLAYERS_PER_TEE


@dataclass(frozen=True)
class CartPackage:
    id: Any
    name: str
    price: float
    includes_buggy: Optional[bool] = None
    includes_lunch: Optional[bool] = None

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "includesBuggy": self.includes_buggy,
            "includesLunch": self.includes_lunch,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            name=str(data["name"]),
            price=float(data.get("price") or 0),
            includes_buggy=data.get("includesBuggy"),
            includes_lunch=data.get("includesLunch"),
        )


@dataclass(frozen=True)
class CartAddOn:
    id: Any
    name: str
    price: float
    total_price: float
    quantity: Optional[int] = None

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "totalPrice": self.total_price,
        }

    @classmethod
    def from_dict(cls, data):
        quantity = data.get("quantity")
        return cls(
            id=data["id"],
            name=str(data["name"]),
            price=float(data.get("price") or 0),
            total_price=float(data.get("totalPrice") or 0),
            quantity=int(quantity) if quantity is not None else None,
        )


@dataclass(frozen=True)
class CartItem:
    """One selected tee time with its package and add-ons"""

    id: str
    course_id: str
    course_name: str
    date: str
    time: str
    players: int
    package: CartPackage
    total_price: float
    provider_type: str
    add_ons: List[CartAddOn] = field(default_factory=list)
    player_names: Optional[List[str]] = None

    def __post_init__(self):
        if isinstance(self.players, bool) or not isinstance(self.players, int):
            raise ValueError(f"players must be an integer, got {self.players!r}")
        if not 1 <= self.players <= MAX_PLAYERS_PER_TEE:
            raise ValueError(f"players must be between 1 and {MAX_PLAYERS_PER_TEE}, got {self.players}")
        if not isinstance(self.course_name, str):
            raise ValueError(f"courseName must be a string, got {self.course_name!r}")
        if self.player_names is not None and (
            not isinstance(self.player_names, list)
            or not all(isinstance(n, str) for n in self.player_names)
        ):
            raise ValueError(f"playerNames must be a list of names, got {self.player_names!r}")

    @property
    def key(self):
        return (self.course_id, self.time)

    def to_dict(self):
        data = {
            "id": self.id,
            "courseId": self.course_id,
            "courseName": self.course_name,
            "date": self.date,
            "time": self.time,
            "players": self.players,
            "package": self.package.to_dict(),
            "addOns": [a.to_dict() for a in self.add_ons],
            "totalPrice": self.total_price,
            "providerType": self.provider_type,
        }
        if self.player_names is not None:
            data["playerNames"] = list(self.player_names)
        return data

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise TypeError(f"cart item must be an object, got {type(data).__name__}")
        names = data.get("playerNames")
        return cls(
            id=str(data["id"]),
            course_id=str(data["courseId"]),
            course_name=str(data.get("courseName", "")),
            date=str(data["date"]),
            time=str(data["time"]),
            players=data["players"],
            package=CartPackage.from_dict(data["package"]),
            add_ons=[CartAddOn.from_dict(a) for a in data.get("addOns") or []],
            total_price=float(data.get("totalPrice") or 0),
            provider_type=str(data.get("providerType", "")),
            player_names=[str(n) for n in names] if names is not None else None,
        )
