"""
Second decode phase: the fetcher's concatenated `results` buffer into typed
records, one decoder per Guidebook resource.

A single bad record fails the whole resource; there is no best-effort mode.
"""
from typing import List, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from xformer_core.errors import DecodeError
from xformer_core.logger_config import setup_logger
from xformer_core.models.guidebook import (
    CatLink,
    CustomList,
    GuidebookLocation,
    GuidebookModel,
    GuidebookSession,
    ListItem,
    ScheduleTrack,
)

logger = setup_logger()

M = TypeVar("M", bound=GuidebookModel)


def decode_records(payload: bytes, model: Type[M]) -> List[M]:
    try:
        return TypeAdapter(List[model]).validate_json(payload)
    except ValidationError as e:
        logger.debug(f"undecodable {model.__name__} payload: {payload[:2000]!r}")
        raise DecodeError(f"failed to decode guidebook {model.__name__} records: {e}", payload=payload) from e


def decode_sessions(payload: bytes) -> List[GuidebookSession]:
    return decode_records(payload, GuidebookSession)


def decode_locations(payload: bytes) -> List[GuidebookLocation]:
    return decode_records(payload, GuidebookLocation)


def decode_tracks(payload: bytes) -> List[ScheduleTrack]:
    return decode_records(payload, ScheduleTrack)


def decode_custom_lists(payload: bytes) -> List[CustomList]:
    return decode_records(payload, CustomList)


def decode_list_items(payload: bytes) -> List[ListItem]:
    return decode_records(payload, ListItem)


def decode_links(payload: bytes) -> List[CatLink]:
    return decode_records(payload, CatLink)
