"""
Run configuration, read from the environment once per process.

Every value has a default so a bare `xformer --dump` can run against a
guide as soon as GB_API_KEY and GB_ID are exported.
"""
from typing import Annotated, Any, Mapping, Optional, Tuple

from pydantic import Field, PositiveFloat, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from xformer_core.errors import ConfigError
from xformer_core.logger_config import setup_logger

logger = setup_logger()

# CONFIG
API_BASE = "https://builder.guidebook.com/open-api/v1.1"
LINK_BASE = "https://guidebook.com/g/#/guide/{guide_id}/schedule/?"
GUESTS_OF_HONOR_ID = 1153959
REQUEST_TIMEOUT = 30.0


class Conf(BaseSettings):
    """Settings for one run; override via env or .env."""

    guidebook_api_key: str = Field("not set", alias="GB_API_KEY")
    guidebook_id: str = Field("not set", alias="GB_ID")
    schedule_path: str = Field("/var/www/html/schedule.json", alias="SCHEDULE_PATH")
    stream_path: str = Field("/var/www/html/streaming.csv", alias="STREAM_PATH")
    stream_links_path: str = Field("/var/www/html/stream_links.csv", alias="STREAM_LINKS_PATH")
    chat_links_path: str = Field("/var/www/html/chat_links.csv", alias="CHAT_LINKS_PATH")
    replay_links_path: str = Field("/var/www/html/replay_links.csv", alias="REPLAY_LINKS_PATH")
    replays_path: Optional[str] = Field(None, alias="REPLAYS_PATH")
    api_base: str = Field(API_BASE, alias="GB_API_BASE")
    link_base: str = Field(LINK_BASE, alias="GB_LINK_BASE")
    guests_of_honor_id: int = Field(GUESTS_OF_HONOR_ID, alias="GB_GUESTS_OF_HONOR_ID")
    # "4711, 4712"
    virtual_location_ids: Annotated[Tuple[int, ...], NoDecode] = Field((), alias="GB_VIRTUAL_LOCATION_IDS")
    timeout: PositiveFloat = Field(REQUEST_TIMEOUT, alias="GB_TIMEOUT")
    debug: bool = Field(False, alias="XFORMER_DEBUG")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    @field_validator("virtual_location_ids", mode="before")
    @classmethod
    def _split_ids(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        return value

    @field_validator("replays_path", mode="before")
    @classmethod
    def _empty_is_none(cls, value: Any) -> Any:
        return value or None

    @field_validator("api_base")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def _distinct_outputs(self) -> "Conf":
        if self.schedule_path == self.stream_path:
            raise ValueError("SCHEDULE_PATH and STREAM_PATH must be set to different values.")
        return self

    def session_link(self, session_id: int) -> str:
        return f"{self.link_base.format(guide_id=self.guidebook_id)}item_id={session_id}"


def load_config(env: Optional[Mapping[str, str]] = None) -> Conf:
    """Settings from the process environment, with `env` taking precedence."""
    try:
        conf = Conf(**dict(env or {}))
    except ValueError as e:
        raise ConfigError(f"invalid configuration: {e}") from e

    if conf.debug:
        for name, value in conf.model_dump(by_alias=True).items():
            # never echo the API key
            shown = "<hidden>" if name == "GB_API_KEY" else repr(value)
            logger.debug(f"{name} is {shown}")
    if not conf.virtual_location_ids:
        logger.warning("GB_VIRTUAL_LOCATION_IDS is not set, every session will be treated as in person.")

    return conf
