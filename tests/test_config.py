import pytest

from xformer_core.config import API_BASE, GUESTS_OF_HONOR_ID, load_config
from xformer_core.errors import ConfigError


def test_defaults():
    conf = load_config({})
    assert conf.guidebook_api_key == "not set"
    assert conf.api_base == API_BASE
    assert conf.guests_of_honor_id == GUESTS_OF_HONOR_ID
    assert conf.virtual_location_ids == ()
    assert conf.replays_path is None
    assert conf.schedule_path == "/var/www/html/schedule.json"


def test_environment_overrides():
    conf = load_config({
        "GB_API_KEY": "k",
        "GB_ID": "77",
        "GB_VIRTUAL_LOCATION_IDS": "4001, 4002",
        "GB_GUESTS_OF_HONOR_ID": "5",
        "GB_API_BASE": "https://gb.test/api/",
        "REPLAYS_PATH": "/tmp/replays.csv",
        "XFORMER_DEBUG": "true",
    })
    assert conf.virtual_location_ids == (4001, 4002)
    assert conf.guests_of_honor_id == 5
    assert conf.api_base == "https://gb.test/api"
    assert conf.replays_path == "/tmp/replays.csv"
    assert conf.debug is True
    assert conf.session_link(9).endswith("/guide/77/schedule/?item_id=9")


def test_schedule_and_stream_paths_must_differ():
    with pytest.raises(ConfigError):
        load_config({"SCHEDULE_PATH": "/tmp/x", "STREAM_PATH": "/tmp/x"})


@pytest.mark.parametrize("env", [{"GB_GUESTS_OF_HONOR_ID": "abc"}, {"GB_VIRTUAL_LOCATION_IDS": "1,x"},
                                 {"GB_TIMEOUT": "soon"}, {"GB_TIMEOUT": "0"}, {"GB_TIMEOUT": "-5"}])
def test_bad_numbers(env):
    with pytest.raises(ConfigError):
        load_config(env)


def test_virtual_location_ids_are_split():
    assert load_config({"GB_VIRTUAL_LOCATION_IDS": "1,,2 "}).virtual_location_ids == (1, 2)
    assert load_config({"GB_VIRTUAL_LOCATION_IDS": ""}).virtual_location_ids == ()


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("GB_ID", "314")
    monkeypatch.setenv("GB_VIRTUAL_LOCATION_IDS", "7,8")
    monkeypatch.setenv("GB_TIMEOUT", "2.5")

    conf = load_config()

    assert conf.guidebook_id == "314"
    assert conf.virtual_location_ids == (7, 8)
    assert conf.timeout == 2.5
    assert load_config({"GB_ID": "1"}).guidebook_id == "1"


def test_empty_replays_path_is_none():
    assert load_config({"REPLAYS_PATH": ""}).replays_path is None
