"""
Output records for the Watson schedule front-end.

These are the contract with the front-end's schedule.json; the JSON keys
produced by to_dict() must stay stable.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

# 2025-08-31T10:00:00.000Z
WATSON_TIMESPEC = "milliseconds"

DEFAULT_LOCATION = "Discord"
GUEST_OF_HONOR_ROLE = "Guest of Honor"

TAG_CATEGORY_TRACK = "Track"
TAG_CATEGORY_ENVIRONMENT = "Environment"
VIRTUAL_SESSION = "Virtual Session"
IN_PERSON_SESSION = "In Person Session"


@dataclass(frozen=True)
class Tag:
    label: str
    value: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "value": self.value, "category": self.category}


@dataclass(frozen=True)
class Links:
    session: str = ""
    stage: str = ""
    replay: str = ""
    chat: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in (("session", self.session), ("stage", self.stage),
                                  ("replay", self.replay), ("chat", self.chat)) if v}


@dataclass(frozen=True)
class Person:
    id: int
    name: str
    role: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.role:
            d["role"] = self.role
        return d


@dataclass(frozen=True)
class WatsonSession:
    id: int
    locations: Tuple[str, ...]
    name: str
    description: str
    start_time: str
    duration_minutes: int
    tags: Tuple[Tag, ...] = field(default_factory=tuple)
    links: Links = field(default_factory=Links)
    people: Tuple[Person, ...] = field(default_factory=tuple)

    @property
    def is_virtual(self) -> bool:
        return any(t.category == TAG_CATEGORY_ENVIRONMENT and t.label == VIRTUAL_SESSION for t in self.tags)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "loc": list(self.locations),
            "title": self.name,
            "desc": self.description,
            "datetime": self.start_time,
            "mins": self.duration_minutes,
            "tags": [t.to_dict() for t in self.tags],
            "links": self.links.to_dict(),
        }
        if self.people:
            d["people"] = [p.to_dict() for p in self.people]
        return d
