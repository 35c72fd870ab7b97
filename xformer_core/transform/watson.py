"""
Turns a GuideBook snapshot into Watson schedule sessions.

Lookups through the snapshot are tolerant: ids Guidebook has retired come
back as empty names. Timestamps are not: one unparsable start or end time
fails the whole run.
"""
import re
from datetime import datetime, timedelta
from typing import Collection, Iterable, List, Mapping, Optional, Tuple

from xformer_core.config import Conf
from xformer_core.errors import TransformError
from xformer_core.logger_config import setup_logger
from xformer_core.models.guidebook import (
    GUIDEBOOK_TIME_FORMAT,
    GUIDEBOOK_TIME_FORMAT_NO_FRACTION,
    GuideBook,
    GuidebookSession,
)
from xformer_core.models.watson import (
    DEFAULT_LOCATION,
    GUEST_OF_HONOR_ROLE,
    IN_PERSON_SESSION,
    TAG_CATEGORY_ENVIRONMENT,
    TAG_CATEGORY_TRACK,
    VIRTUAL_SESSION,
    WATSON_TIMESPEC,
    Links,
    Person,
    Tag,
    WatsonSession,
)

logger = setup_logger()

_NOT_SLUG = re.compile(r"[^a-z0-9_\s]")
_WHITESPACE = re.compile(r"\s+")


def slugify(text: str) -> str:
    """ "track_Art & Craft" -> "track_art_craft" """
    text = _NOT_SLUG.sub("", text.lower())
    return _WHITESPACE.sub("_", text.strip())


def parse_guidebook_time(value: str) -> datetime:
    for fmt in (GUIDEBOOK_TIME_FORMAT, GUIDEBOOK_TIME_FORMAT_NO_FRACTION):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"time {value!r} does not match {GUIDEBOOK_TIME_FORMAT!r}")


def format_watson_time(value: datetime) -> str:
    formatted = value.isoformat(timespec=WATSON_TIMESPEC)
    if value.utcoffset() == timedelta(0):
        return formatted[:-len("+00:00")] + "Z"
    return formatted


def resolve_locations(gb: GuideBook, location_ids: Iterable[int]) -> Tuple[str, ...]:
    # unknown ids still contribute an empty name
    names = tuple(gb.location_name(lid) for lid in location_ids)
    return names or (DEFAULT_LOCATION,)


def classify_environment(session_id: int, location_ids: Collection[int],
                         virtual_ids: Collection[int]) -> Tuple[bool, bool]:
    virtual = any(lid in virtual_ids for lid in location_ids)
    in_person = any(lid not in virtual_ids for lid in location_ids)
    if not (virtual or in_person):
        logger.warning(f"Session {session_id} has no recognizable environment, treating it as in person.")
        in_person = True
    return virtual, in_person


def build_tags(gb: GuideBook, session: GuidebookSession, virtual: bool, in_person: bool) -> Tuple[Tag, ...]:
    tags = []
    for track_id in session.schedule_tracks:
        name = gb.track_name(track_id)
        tags.append(Tag(label=name, value=slugify("track_" + name), category=TAG_CATEGORY_TRACK))
    if virtual:
        tags.append(Tag(label=VIRTUAL_SESSION, value=slugify("env_" + VIRTUAL_SESSION),
                        category=TAG_CATEGORY_ENVIRONMENT))
    if in_person:
        tags.append(Tag(label=IN_PERSON_SESSION, value=slugify("env_" + IN_PERSON_SESSION),
                        category=TAG_CATEGORY_ENVIRONMENT))
    return tuple(tags)


def build_people(gb: GuideBook, session_id: int) -> Tuple[Person, ...]:
    # People in the session are only reachable through its links
    people = []
    for target_id, link in gb.links_for(session_id).items():
        if not link.is_person:
            continue
        role = GUEST_OF_HONOR_ROLE if target_id in gb.guests_of_honor else None
        people.append(Person(id=target_id, name=gb.list_item_name(target_id), role=role))
    return tuple(people)


def transform_session(gb: GuideBook, session: GuidebookSession, config: Conf,
                      replays: Optional[Mapping[str, str]] = None) -> WatsonSession:
    try:
        start = parse_guidebook_time(session.start_time)
        finish = parse_guidebook_time(session.end_time)
    except ValueError as e:
        raise TransformError(f"session {session.id} ({session.name!r}) has an invalid time") from e

    virtual, in_person = classify_environment(session.id, session.locations, config.virtual_location_ids)
    deep_link = config.session_link(session.id)

    return WatsonSession(
        id=session.id,
        locations=resolve_locations(gb, session.locations),
        name=session.name,
        description=session.description,
        start_time=format_watson_time(start),
        duration_minutes=int((finish - start) / timedelta(minutes=1)),
        tags=build_tags(gb, session, virtual, in_person),
        links=Links(
            session=deep_link if virtual else "",
            replay=(replays or {}).get(session.name.strip(), ""),
            chat=deep_link,
        ),
        people=build_people(gb, session.id),
    )


def watson_from_guidebook(gb: GuideBook, config: Conf,
                          replays: Optional[Mapping[str, str]] = None) -> List[WatsonSession]:
    watson = [transform_session(gb, session, config, replays) for session in gb.sessions]
    watson.sort(key=lambda s: s.start_time)
    logger.info(f"Transformed {len(watson)} sessions.")
    return watson
