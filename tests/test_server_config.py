import pytest

from kiltbench.config_tools import ConfigError, EnvConfigReader
from kiltbench.server_config import (
    ServerConfig,
    parse_datasource_config,
    parse_device_config,
    parse_int_list,
)

CARDS = {0: 100, 1: 200, 2: 300}


def reader(**extra):
    env = {"KILT_VERBOSE": "1", "KILT_MODEL_BATCH_SIZE": "4"}
    env.update(extra)
    return EnvConfigReader(env)


def test_parse_int_list():
    assert parse_int_list("0,1,2") == [0, 1, 2]
    assert parse_int_list(" 5") == [5]


@pytest.mark.parametrize("text", ["", "1,", "a,2"])
def test_parse_int_list_rejects_bad_input(text):
    with pytest.raises(ConfigError):
        parse_int_list(text)


def test_parse_datasource_config():
    assert parse_datasource_config("0,1:2,3") == [[0, 1], [2, 3]]


def test_parse_device_config():
    assert parse_device_config("0,1,2:1,3,4") == ([0, 1], [[1, 2], [3, 4]])
    assert parse_device_config("2") == ([2], [[]])


def test_defaults():
    cfg = ServerConfig.from_reader(reader(), CARDS.__getitem__)
    assert cfg.max_wait == 100000
    assert cfg.scheduler_yield_time == 10
    assert cfg.dispatch_yield_time == -1
    assert cfg.unique_server_id == "KILT_SERVER"
    assert cfg.device_ids == [0]
    assert cfg.device_count == 1
    assert cfg.batch_size == 4


def test_generated_affinities():
    cfg = ServerConfig.from_reader(reader(KILT_DEVICE_IDS="0,2"), CARDS.__getitem__)
    assert cfg.datasource_count == 3
    for d in range(3):
        assert cfg.datasource_affinity(d) == [CARDS[d]]
        aff = cfg.device_affinity(d)
        assert len(aff) == 4
        assert aff[0] == CARDS[d]
        assert aff == list(range(aff[0], aff[0] + 4))
        assert cfg.datasource_for_device(d) == d


def test_explicit_configs():
    cfg = ServerConfig.from_reader(
        reader(KILT_DATASOURCE_CONFIG="5,6:7", KILT_DEVICE_CONFIG="1,8,9:0,10"),
        CARDS.__getitem__,
    )
    assert cfg.datasource_affinity(0) == [5, 6]
    assert cfg.datasource_count == 2
    assert cfg.datasource_for_device(0) == 1
    assert cfg.device_affinity(1) == [10]


def test_missing_verbosity_raises():
    with pytest.raises(ConfigError):
        ServerConfig.from_reader(
            EnvConfigReader({"KILT_MODEL_BATCH_SIZE": "1"}), CARDS.__getitem__
        )