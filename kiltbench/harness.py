"""Load generator harness: settings, system under test and sample library."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, TextIO

from kiltbench.config_tools import ConfigReader, get_bool, get_int, get_opt_str, get_str


@dataclass(frozen=True)
class QuerySample:
    """A sample issued by the load generator."""

    id: int
    index: int


@dataclass(frozen=True)
class QuerySampleResponse:
    """The result returned for one sample."""

    id: int
    data: bytes


class TestScenario(Enum):
    SINGLE_STREAM = "SingleStream"
    MULTI_STREAM = "MultiStream"
    SERVER = "Server"
    OFFLINE = "Offline"


class TestMode(Enum):
    SUBMISSION_RUN = "SubmissionRun"
    ACCURACY_ONLY = "AccuracyOnly"
    PERFORMANCE_ONLY = "PerformanceOnly"
    FIND_PEAK_PERFORMANCE = "FindPeakPerformance"


def parse_scenario(text: str) -> TestScenario:
    """Map a scenario name to a scenario; unknown names mean SingleStream."""
    try:
        return TestScenario(text)
    except ValueError:
        return TestScenario.SINGLE_STREAM


def parse_mode(text: str) -> TestMode | None:
    """Map a mode name to a mode; empty means unset, unknown means SubmissionRun."""
    if text == "":
        return None
    try:
        return TestMode(text)
    except ValueError:
        return TestMode.SUBMISSION_RUN


@dataclass(frozen=True)
class HarnessConfig:
    """Settings for the load generator harness."""

    trigger_cold_run: bool
    verbosity: int
    mlperf_conf_path: str
    user_conf_path: str
    model_name: str
    scenario: str
    mode: str

    @classmethod
    def from_reader(cls, reader: ConfigReader) -> "HarnessConfig":
        return cls(
            trigger_cold_run=get_bool(reader, "LOADGEN_TRIGGER_COLD_RUN"),
            verbosity=get_int(reader, "KILT_VERBOSE"),
            mlperf_conf_path=get_str(reader, "LOADGEN_MLPERF_CONF"),
            user_conf_path=get_str(reader, "LOADGEN_USER_CONF"),
            model_name=get_opt_str(reader, "KILT_MODEL_NAME", "unknown_model"),
            scenario=get_str(reader, "LOADGEN_SCENARIO"),
            mode=get_str(reader, "LOADGEN_MODE"),
        )


@dataclass(frozen=True)
class TestSettings:
    """What the load generator is asked to run."""

    __test__ = False

    scenario: TestScenario
    mode: TestMode | None
    model_name: str
    mlperf_conf_path: str
    user_conf_path: str


def build_test_settings(cfg: HarnessConfig) -> TestSettings:
    """Turn harness settings into load generator test settings."""
    return TestSettings(
        scenario=parse_scenario(cfg.scenario),
        mode=parse_mode(cfg.mode),
        model_name=cfg.model_name,
        mlperf_conf_path=cfg.mlperf_conf_path,
        user_conf_path=cfg.user_conf_path,
    )


class SystemUnderTest:
    """Passes queries from the load generator to the inference library."""

    def __init__(self, kil: Any, cfg: HarnessConfig, out: TextIO | None = None) -> None:
        self._kil = kil
        self._cfg = cfg
        self._out = sys.stdout if out is None else out
        self.query_counter = 0

    def name(self) -> str:
        return self._kil.unique_server_id()

    def issue_query(self, samples: Sequence[QuerySample]) -> None:
        self.query_counter += 1
        vl = self._cfg.verbosity
        if vl > 1:
            first = samples[0]
            self._out.write(
                f"{self.query_counter}) IssueQuery([{len(samples)}],"
                f"{first.id},{first.index})\n"
            )
        elif vl:
            self._out.write("Q")
            self._out.flush()
        self._kil.inference(samples)

    def flush_queries(self) -> None:
        if self._cfg.verbosity:
            self._out.write("\n")


class SampleLibrary:
    """Tells the load generator which samples exist and loads them on demand."""

    def __init__(self, kil: Any) -> None:
        self._kil = kil

    def name(self) -> str:
        return "QAIC_QSL"

    def total_sample_count(self) -> int:
        return self._kil.available_samples_max()

    def performance_sample_count(self) -> int:
        return self._kil.samples_in_memory_max()

    def load_samples_to_ram(self, indices: Sequence[int]) -> None:
        self._kil.load_next_batch(indices)

    def unload_samples_from_ram(self, indices: Sequence[int]) -> None:
        self._kil.unload_batch(indices)