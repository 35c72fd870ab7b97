"""
Typed records for the Guidebook Open API resources, plus the assembled
GuideBook snapshot.

The records are pydantic models so that a type mismatch in a page is fatal
instead of silently coerced. A JSON null falls back to the field default.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# 2017-08-31T20:18:28.038556+0000
GUIDEBOOK_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f%z"
GUIDEBOOK_TIME_FORMAT_NO_FRACTION = "%Y-%m-%dT%H:%M:%S%z"

SOURCE_TYPE_SESSION = "schedule.session"
TARGET_TYPE_PERSON = "custom_list.customlistitem"
TARGET_TYPE_STREAM = "uri_resource.webview"


def drop_nulls(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: v for k, v in data.items() if v is not None}
    return data


class GuidebookModel(BaseModel):
    model_config = ConfigDict(strict=True, extra="ignore", populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        return drop_nulls(data)


class MultiResponse(BaseModel):
    """Envelope of every paginated Guidebook collection. Results stay untyped."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        return drop_nulls(data)

    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[Any] = Field(default_factory=list)


class GuidebookSession(GuidebookModel):
    id: int
    name: str = ""
    description: str = Field("", alias="description_html")
    start_time: str = ""
    end_time: str = ""
    allow_rating: bool = False
    add_to_schedule_enabled: bool = False
    all_day: bool = False
    image: str = ""
    rank: float = 0.0
    moderator_notes: str = ""
    locations: List[int] = Field(default_factory=list)
    schedule_tracks: List[int] = Field(default_factory=list)


class GuidebookLocation(GuidebookModel):
    id: int
    name: str = ""


class ScheduleTrack(GuidebookModel):
    id: int
    name: str = ""


class CustomList(GuidebookModel):
    id: int
    name: str = ""
    items: List[int] = Field(default_factory=list)


class ListItem(GuidebookModel):
    id: int
    name: str = ""
    subtitle: str = ""
    thumbnail: str = ""
    description: str = Field("", alias="description_html")
    custom_lists: List[int] = Field(default_factory=list)
    image: str = ""


class CatLink(GuidebookModel):
    id: int
    title: str = ""
    source_type: str = Field("", alias="source_content_type")
    source_id: int = Field(0, alias="source_object_id")
    target_type: str = Field("", alias="target_content_type")
    target_id: int = Field(0, alias="target_object_id")
    rank: float = 0.0
    category: int = 0


@dataclass(frozen=True)
class SessionLink:
    target_type: str
    target_id: int
    rank: float = 0.0
    title: str = ""

    @property
    def is_person(self) -> bool:
        return self.target_type == TARGET_TYPE_PERSON

    @property
    def is_stream(self) -> bool:
        return self.target_type == TARGET_TYPE_STREAM


@dataclass
class SessionLinks:
    """Everything a single session links to, keyed by target id."""

    session_id: int
    target_ids: Dict[int, SessionLink] = field(default_factory=dict)


@dataclass
class GuideBook:
    """Everything we know from Guidebook for one run."""

    sessions: List[GuidebookSession] = field(default_factory=list)
    locations: Dict[int, str] = field(default_factory=dict)
    tracks: Dict[int, str] = field(default_factory=dict)
    lists: Dict[int, CustomList] = field(default_factory=dict)
    list_items: Dict[int, ListItem] = field(default_factory=dict)
    session_links: Dict[int, SessionLinks] = field(default_factory=dict)
    other_links: Dict[int, List[CatLink]] = field(default_factory=dict)
    guests_of_honor: Dict[int, str] = field(default_factory=dict)

    def location_name(self, location_id: int) -> str:
        return self.locations.get(location_id, "")

    def track_name(self, track_id: int) -> str:
        return self.tracks.get(track_id, "")

    def list_item_name(self, item_id: int) -> str:
        item = self.list_items.get(item_id)
        return item.name if item is not None else ""

    def links_for(self, session_id: int) -> Dict[int, SessionLink]:
        links = self.session_links.get(session_id)
        return links.target_ids if links is not None else {}

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready view used by --dump."""
        return {
            "sessions": [s.model_dump(by_alias=True) for s in self.sessions],
            "locations": self.locations,
            "session_links": {
                sid: {
                    "id": links.session_id,
                    "linked_items": {
                        tid: {"target_content_type": link.target_type, "target_object_id": link.target_id}
                        for tid, link in links.target_ids.items()
                    },
                }
                for sid, links in self.session_links.items()
            },
            "other_links": {
                sid: [link.model_dump(by_alias=True) for link in links]
                for sid, links in self.other_links.items()
            },
            "custom_lists": {lid: lst.model_dump() for lid, lst in self.lists.items()},
            "custom_list_items": {iid: item.model_dump(by_alias=True) for iid, item in self.list_items.items()},
            "tracks": self.tracks,
            "guests_of_honor": self.guests_of_honor,
        }
