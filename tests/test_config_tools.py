import json
import math

import pytest

from kiltbench.config_tools import (
    ConfigError,
    EnvConfigReader,
    JsonConfigReader,
    alter_float,
    alter_int,
    alter_str,
    atof,
    atoi,
    get_bool,
    get_float,
    get_int,
    get_opt_bool,
    get_opt_str,
    get_str,
)


@pytest.fixture
def env():
    return EnvConfigReader(
        {
            "KILT_VERBOSE": "2",
            "KILT_MODEL_NAME": "resnet50",
            "LOADGEN_TRIGGER_COLD_RUN": "yes",
            "KILT_SCALE": "0.25",
            "KILT_EMPTY": "",
            "KILT_OFF": "no",
        }
    )


@pytest.mark.parametrize(
    "text, expected",
    [("42", 42), ("  42abc", 42), ("-7", -7), ("+5", 5), ("abc", 0), ("", 0)],
)
def test_atoi(text, expected):
    assert atoi(text) == expected


@pytest.mark.parametrize(
    "text, expected",
    [("3.5x", 3.5), ("  -2e3", -2000.0), (".5", 0.5), ("", 0.0), ("x1", 0.0)],
)
def test_atof(text, expected):
    assert atof(text) == expected


def test_atof_special_values():
    assert atof("inf") == math.inf
    assert atof("-Infinity") == -math.inf
    assert math.isnan(atof("nan"))
    assert atof("0x10") == 16.0


def test_env_reader_get(env):
    assert env.get("KILT_MODEL_NAME") == "resnet50"
    assert env.get("MISSING") is None


def test_get_str_and_missing(env):
    assert get_str(env, "KILT_MODEL_NAME") == "resnet50"
    with pytest.raises(ConfigError, match="Required environment variable MISSING is not set"):
        get_str(env, "MISSING")


def test_get_int_and_float(env):
    assert get_int(env, "KILT_VERBOSE") == 2
    assert get_float(env, "KILT_SCALE") == 0.25
    with pytest.raises(ConfigError):
        get_int(env, "MISSING")
    with pytest.raises(ConfigError):
        get_float(env, "MISSING")


def test_get_opt_str(env):
    assert get_opt_str(env, "MISSING", "unknown_model") == "unknown_model"
    assert get_opt_str(env, "KILT_MODEL_NAME", "unknown_model") == "resnet50"


def test_get_opt_bool(env):
    assert get_opt_bool(env, "LOADGEN_TRIGGER_COLD_RUN", False) is True
    assert get_opt_bool(env, "KILT_OFF", True) is False
    assert get_opt_bool(env, "MISSING", True) is True


@pytest.mark.parametrize("word", ["YES", "yes", "ON", "on", "1", "true"])
def test_get_bool_true_words(word):
    assert get_bool(EnvConfigReader({"FLAG": word}), "FLAG") is True


def test_get_bool_false_cases(env):
    assert get_bool(env, "KILT_OFF") is False
    assert get_bool(env, "MISSING") is False
    assert get_bool(EnvConfigReader({"FLAG": "True"}), "FLAG") is False


def test_alter_helpers(env):
    assert alter_str(env.get("MISSING"), "KILT_SERVER") == "KILT_SERVER"
    assert alter_str(env.get("KILT_EMPTY"), "KILT_SERVER") == ""
    assert alter_int(env.get("MISSING"), 100000) == 100000
    assert alter_int(env.get("KILT_VERBOSE"), 100000) == 2
    assert alter_int(None, "10") == 10
    assert alter_float(None, "0.25") == 0.25
    assert alter_float("1.5", "0.25") == 1.5


def test_json_reader_types():
    reader = JsonConfigReader(
        {"s": "text", "i": 12, "f": 3.9, "b": True, "n": False, "l": [1], "z": None}
    )
    assert reader.get("s") == "text"
    assert reader.get("i") == "12"
    assert reader.get("f") == "3"
    assert reader.get("b") == "true"
    assert reader.get("n") == "false"
    assert reader.get("l") is None
    assert reader.get("z") is None
    assert reader.get("absent") is None


def test_json_reader_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"KILT_VERBOSE": 1, "KILT_MODEL_NAME": "bert"}))
    reader = JsonConfigReader.from_file(path)
    assert get_int(reader, "KILT_VERBOSE") == 1
    assert get_str(reader, "KILT_MODEL_NAME") == "bert"


def test_json_reader_invalid_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError):
        JsonConfigReader.from_file(path)
    with pytest.raises(ConfigError):
        JsonConfigReader.from_file(tmp_path / "absent.json")


def test_json_reader_requires_object():
    with pytest.raises(ConfigError):
        JsonConfigReader([1, 2, 3])