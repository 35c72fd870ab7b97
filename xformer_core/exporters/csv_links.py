"""
Denormalized CSV projections of the Watson sessions.

- streaming.csv: one row per virtual session, for the stream operators
- chat/stream/replay link tables, in the shape Guidebook's link import expects
"""
from typing import Dict, Iterable, List, Set, TextIO

import pandas as pd

from xformer_core.errors import ConfigError
from xformer_core.logger_config import setup_logger
from xformer_core.models.watson import WatsonSession

logger = setup_logger()

STREAMING_COLUMNS = ["id", "title", "datetime", "mins", "loc", "session"]
LINK_COLUMNS = ["session_id", "session_name", "link_title", "url"]
REPLAY_INDEX_COLUMNS = ["title", "url"]


def streaming_frame(sessions: Iterable[WatsonSession]) -> pd.DataFrame:
    rows = [
        {
            "id": s.id,
            "title": s.name,
            "datetime": s.start_time,
            "mins": s.duration_minutes,
            "loc": "; ".join(s.locations),
            "session": s.links.session,
        }
        for s in sessions if s.is_virtual
    ]
    return pd.DataFrame(rows, columns=STREAMING_COLUMNS)


def links_frame(sessions: Iterable[WatsonSession], link_title: str, kind: str) -> pd.DataFrame:
    rows = []
    for s in sessions:
        url = getattr(s.links, kind)
        if not url:
            continue
        rows.append({"session_id": s.id, "session_name": s.name, "link_title": link_title, "url": url})
    return pd.DataFrame(rows, columns=LINK_COLUMNS)


def streaming_csv(f: TextIO, sessions: List[WatsonSession]) -> None:
    df = streaming_frame(sessions)
    df.to_csv(f, index=False)
    logger.info(f"Wrote {len(df)} streaming rows.")


def chat_links_csv(f: TextIO, sessions: List[WatsonSession]) -> None:
    links_frame(sessions, "Chat", "chat").to_csv(f, index=False)


def stream_links_csv(f: TextIO, sessions: List[WatsonSession]) -> None:
    links_frame(sessions, "Watch Stream", "session").to_csv(f, index=False)


def replay_links_csv(f: TextIO, sessions: List[WatsonSession]) -> None:
    links_frame(sessions, "Watch Replay", "replay").to_csv(f, index=False)


def load_replays(path: str) -> Dict[str, str]:
    """Read a `title,url` replay index into a title -> URL map."""
    try:
        df = pd.read_csv(path, dtype=str).fillna("")
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ConfigError(f"Replay index {path} could not be read") from e
    missing = [c for c in REPLAY_INDEX_COLUMNS if c not in df.columns]
    if missing:
        raise ConfigError(f"Replay index {path} is missing columns: {', '.join(missing)}")
    replays = {row.title.strip(): row.url.strip() for row in df.itertuples(index=False) if row.url.strip()}
    logger.info(f"Loaded {len(replays)} replays from {path}.")
    return replays


def unmatched_replay_titles(replays: Dict[str, str], sessions: Iterable[WatsonSession]) -> Set[str]:
    titles = {s.name.strip() for s in sessions}
    return {title for title in replays if title not in titles}
