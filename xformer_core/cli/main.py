"""
Entry point for the xformer command.

- default: fetch the guide, write schedule.json and streaming.csv
- --csv: also write the chat, stream and replay link tables for Guidebook
- --dump: print everything loaded from Guidebook as JSON and stop
"""
import argparse
import sys
from typing import Callable, List, Optional

import requests

from xformer_core.config import Conf, load_config
from xformer_core.errors import DecodeError, XformerError, error_chain, find_cause
from xformer_core.exporters.csv_links import (
    chat_links_csv,
    load_replays,
    replay_links_csv,
    stream_links_csv,
    streaming_csv,
    unmatched_replay_titles,
)
from xformer_core.exporters.json_export import dump_json
from xformer_core.guidebook.fetcher import RequestCounter
from xformer_core.guidebook.snapshot import load_guidebook
from xformer_core.logger_config import setup_logger
from xformer_core.models.watson import WatsonSession
from xformer_core.transform.watson import watson_from_guidebook

logger = setup_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xformer",
        description="Transform the Guidebook schedule into the Watson schedule format.",
    )
    parser.add_argument("--csv", action="store_true",
                        help="exports CSV files for stream, chat and replay links for loading into GuideBook")
    parser.add_argument("--dump", action="store_true",
                        help="dumps the full contents we've loaded from GuideBook as JSON")
    return parser


def write_file(path: str, writer: Callable, sessions: List[WatsonSession]) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer(f, sessions)
    except OSError as e:
        logger.error(f"Error opening file {path!r} for writing: {e}")


def run(config: Conf, args: argparse.Namespace, session: Optional[requests.Session] = None) -> None:
    if session is None:
        with requests.Session() as http:
            return run(config, args, http)

    counter = RequestCounter()
    logger.info("Started fetching from Guidebook")
    guidebook = load_guidebook(session, config, counter)
    logger.info(f"Guidebook fetch complete after {counter.successful} requests")

    if args.dump:
        dump_json(sys.stdout, guidebook.to_dict())
        return

    replays = load_replays(config.replays_path) if config.replays_path else {}
    sessions = watson_from_guidebook(guidebook, config, replays)

    write_file(config.schedule_path, dump_json, sessions)
    write_file(config.stream_path, streaming_csv, sessions)

    if args.csv:
        write_file(config.chat_links_path, chat_links_csv, sessions)
        write_file(config.stream_links_path, stream_links_csv, sessions)
        write_file(config.replay_links_path, replay_links_csv, sessions)
        missing = unmatched_replay_titles(replays, sessions)
        if missing:
            logger.warning(f"There were {len(missing)} titles that were not found in the sessions:")
            for title in sorted(missing):
                logger.warning(f"\t{title}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config()
        run(config, args)
    except XformerError as e:
        logger.error(error_chain(e))
        undecodable = find_cause(e, DecodeError)
        if undecodable is not None:
            logger.error(f"Undecodable Guidebook payload:\n{undecodable.payload.decode('utf-8', 'replace')}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
