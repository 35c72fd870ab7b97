"""
Paginated fetcher for the Guidebook Open API.

Issues authenticated GETs against one collection, follows the `next` cursor
until it runs out and hands back the concatenated `results` as a JSON byte
buffer. Decoding into typed records is left to decoders.py, so transport and
schema stay separate.

Only HTTP 429 with a usable Retry-After header is retried; every other
failure is fatal for the run.
"""
import json
import time
from dataclasses import dataclass
from typing import Any, Callable, List

import requests
from pydantic import ValidationError

from xformer_core.config import Conf
from xformer_core.errors import DecodeError, FetchError, RateLimitError
from xformer_core.logger_config import setup_logger
from xformer_core.models.guidebook import MultiResponse

logger = setup_logger()


@dataclass
class RequestCounter:
    """Successful Guidebook page fetches for the whole run."""

    successful: int = 0

    def increment(self) -> int:
        self.successful += 1
        return self.successful


def collection_url(config: Conf, fetch_what: str) -> str:
    return f"{config.api_base}/{fetch_what}/?guide={config.guidebook_id}"


def retry_after_seconds(headers) -> int:
    """Seconds from a Retry-After header, 0 when missing or unparsable."""
    try:
        return int(str(headers.get("Retry-After", "")).strip())
    except ValueError:
        return 0


def decode_envelope(body: bytes) -> MultiResponse:
    try:
        return MultiResponse.model_validate_json(body)
    except ValidationError as e:
        logger.debug(f"undecodable page: {body[:2000]!r}")
        raise DecodeError(f"failed to decode multi response: {e}", payload=body) from e


def multi_fetch(session: requests.Session, config: Conf, fetch_what: str,
                counter: RequestCounter, sleep: Callable[[float], None] = time.sleep) -> bytes:
    all_results: List[Any] = []
    headers = {"Authorization": f"JWT {config.guidebook_api_key}"}
    next_url = collection_url(config, fetch_what)

    while next_url:
        try:
            response = session.get(next_url, headers=headers, timeout=config.timeout)
        except requests.RequestException as e:
            raise FetchError(f"failed to execute request for {fetch_what}: {e}") from e

        if response.status_code != 200:
            if response.status_code == 429:
                retry_wait = retry_after_seconds(response.headers)
                if retry_wait > 0:
                    logger.info(f"We got a 429 on request {counter.successful + 1} and are now waiting "
                                f"for {retry_wait} seconds before our next request...")
                    sleep(retry_wait + 1)
                    continue
                logger.error("Well, we got rate limited.  Here's the headers...")
                for key, value in response.headers.items():
                    logger.error(f"{key}: {value}")
                raise RateLimitError(
                    f"guidebook API request for {fetch_what} was rate limited without a Retry-After: {response.text}",
                    headers=response.headers, body=response.text)
            raise FetchError(
                f"guidebook API request for {fetch_what} failed with status {response.status_code}: {response.text}",
                status=response.status_code, body=response.text)

        counter.increment()

        page = decode_envelope(response.content)
        logger.debug(f"{fetch_what}: page with {len(page.results)} of {page.count} results")
        all_results.extend(page.results)
        next_url = page.next

    logger.info(f"Fetched {fetch_what} chain - {counter.successful} requests so far.")

    return json.dumps(all_results).encode("utf-8")
