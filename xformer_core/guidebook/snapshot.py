"""
Builds the GuideBook snapshot: every resource fetched and decoded in a fixed
order, then cross-referenced into lookup maps.

Steps run strictly one after another. Any failure aborts the whole load and
is re-raised with the step name; no partial snapshot ever reaches the
transformer.
"""
from typing import Callable, Dict, Iterable, List, Tuple

import requests

from xformer_core.config import Conf
from xformer_core.errors import XformerError, SnapshotError
from xformer_core.guidebook import decoders
from xformer_core.guidebook.fetcher import RequestCounter, multi_fetch
from xformer_core.logger_config import setup_logger
from xformer_core.models.guidebook import (
    SOURCE_TYPE_SESSION,
    CatLink,
    CustomList,
    GuideBook,
    ListItem,
    SessionLink,
    SessionLinks,
)

logger = setup_logger()

Fetch = Callable[[str], bytes]


def build_name_map(records: Iterable) -> Dict[int, str]:
    return {r.id: r.name for r in records}


def invert_list_membership(lists: Iterable[CustomList],
                           items: Iterable[ListItem]) -> Tuple[Dict[int, CustomList], Dict[int, ListItem]]:
    """Populate each list's member ids from the item side; Guidebook only reports it there."""
    members: Dict[int, List[int]] = {}
    lists_map: Dict[int, CustomList] = {}
    for lst in lists:
        lists_map[lst.id] = lst
        members[lst.id] = list(lst.items)

    items_map: Dict[int, ListItem] = {}
    for item in items:
        items_map[item.id] = item
        for list_id in item.custom_lists:
            ids = members.setdefault(list_id, [])
            if item.id not in ids:
                ids.append(item.id)

    for list_id, ids in members.items():
        lst = lists_map.get(list_id)
        if lst is None:
            logger.debug(f"list item membership names unknown custom list {list_id}")
            lists_map[list_id] = CustomList(id=list_id, items=ids)
        else:
            lists_map[list_id] = lst.model_copy(update={"items": ids})

    return lists_map, items_map


def partition_links(links: Iterable[CatLink]) -> Tuple[Dict[int, SessionLinks], Dict[int, List[CatLink]]]:
    session_links: Dict[int, SessionLinks] = {}
    other_links: Dict[int, List[CatLink]] = {}
    for link in links:
        if link.source_type == SOURCE_TYPE_SESSION:
            entry = session_links.setdefault(link.source_id, SessionLinks(session_id=link.source_id))
            entry.target_ids[link.target_id] = SessionLink(
                target_type=link.target_type,
                target_id=link.target_id,
                rank=link.rank,
                title=link.title,
            )
        else:
            other_links.setdefault(link.source_id, []).append(link)
    return session_links, other_links


def resolve_guests_of_honor(lists: Dict[int, CustomList], items: Dict[int, ListItem],
                            list_id: int) -> Dict[int, str]:
    lst = lists.get(list_id)
    if lst is None:
        logger.warning(f"guests of honor list {list_id} was not found in Guidebook")
        return {}
    return {item_id: items[item_id].name if item_id in items else "" for item_id in lst.items}


class _Step:
    def __init__(self, what: str):
        self.what = what

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc is not None and isinstance(exc, XformerError):
            raise SnapshotError(f"failed to load {self.what} from Guidebook") from exc
        return False


def assemble(fetch: Fetch, guests_of_honor_id: int) -> GuideBook:
    """Run every load step against `fetch(collection) -> bytes`."""
    gb = GuideBook()

    with _Step("sessions"):
        gb.sessions = decoders.decode_sessions(fetch("sessions"))

    with _Step("session locations"):
        gb.locations = build_name_map(decoders.decode_locations(fetch("locations")))

    with _Step("schedule tracks"):
        gb.tracks = build_name_map(decoders.decode_tracks(fetch("schedule-tracks")))

    with _Step("lists and listitems"):
        lists = decoders.decode_custom_lists(fetch("custom-lists"))
        items = decoders.decode_list_items(fetch("custom-list-items"))
        gb.lists, gb.list_items = invert_list_membership(lists, items)

    with _Step("session links"):
        gb.session_links, gb.other_links = partition_links(decoders.decode_links(fetch("links")))

    gb.guests_of_honor = resolve_guests_of_honor(gb.lists, gb.list_items, guests_of_honor_id)

    logger.info(f"Loaded {len(gb.sessions)} sessions, {len(gb.locations)} locations, "
                f"{len(gb.tracks)} tracks, {len(gb.lists)} lists, {len(gb.list_items)} list items.")
    return gb


def load_guidebook(session: requests.Session, config: Conf, counter: RequestCounter) -> GuideBook:
    def fetch(what: str) -> bytes:
        return multi_fetch(session, config, what, counter)

    return assemble(fetch, config.guests_of_honor_id)
