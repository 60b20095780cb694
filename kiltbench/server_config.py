"""Server settings: device ids, device and data source core affinities."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from kiltbench.config_tools import ConfigError, ConfigReader, alter_int, alter_str, get_int

_STOI = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


def _stoi(text: str) -> int:
    match = _STOI.match(text)
    if not match:
        raise ConfigError(f"Invalid integer in configuration: {text!r}")
    return int(match.group(1))


def parse_int_list(text: str) -> list[int]:
    """Parse a comma separated list of integers."""
    return [_stoi(part) for part in text.split(",")]


def parse_datasource_config(text: str) -> list[list[int]]:
    """Parse colon separated data source core affinity lists."""
    return [parse_int_list(part) for part in text.split(":")]


def parse_device_config(text: str) -> tuple[list[int], list[list[int]]]:
    """Parse colon separated device entries.

    Each entry is a data source index followed by the device's core affinity.
    Returns the data source index of each device and each device's affinity.
    """
    datasources: list[int] = []
    affinities: list[list[int]] = []
    for entry in text.split(":"):
        first, *rest = entry.split(",")
        datasources.append(_stoi(first))
        affinities.append([_stoi(part) for part in rest])
    return datasources, affinities


@dataclass(frozen=True)
class ServerConfig:
    """Settings for the inference server."""

    verbosity: int
    verbosity_server: int
    batch_size: int
    max_wait: int
    scheduler_yield_time: int
    dispatch_yield_time: int
    unique_server_id: str
    device_ids: list[int] = field(default_factory=list)
    device_affinities: list[list[int]] = field(default_factory=list)
    datasource_affinities: list[list[int]] = field(default_factory=list)
    datasources_for_devices: list[int] = field(default_factory=list)

    @property
    def device_count(self) -> int:
        return len(self.device_ids)

    @property
    def datasource_count(self) -> int:
        return len(self.datasource_affinities)

    @classmethod
    def from_reader(
        cls, reader: ConfigReader, card_affinity: Callable[[int], int]
    ) -> "ServerConfig":
        """Read the settings; ``card_affinity`` gives the first core of a card."""
        verbosity = get_int(reader, "KILT_VERBOSE")
        verbosity_server = alter_int(reader.get("KILT_VERBOSE_SERVER"), 0)
        batch_size = get_int(reader, "KILT_MODEL_BATCH_SIZE")
        max_wait = alter_int(reader.get("KILT_MAX_WAIT_ABS"), 100000)
        scheduler_yield_time = alter_int(reader.get("KILT_SCHEDULER_YIELD_TIME"), 10)
        dispatch_yield_time = alter_int(reader.get("KILT_DISPATCH_YIELD_TIME"), -1)
        ids_str = alter_str(reader.get("KILT_DEVICE_IDS"), "0")
        device_cfg_str = alter_str(reader.get("KILT_DEVICE_CONFIG"), "")
        datasource_cfg_str = alter_str(reader.get("KILT_DATASOURCE_CONFIG"), "")
        unique_server_id = alter_str(
            reader.get("KILT_NETWORK_UNIQUE_SERVER_ID"), "KILT_SERVER"
        )

        device_ids = parse_int_list(ids_str)
        max_device_id = max([1, *(d + 1 for d in device_ids)])

        if datasource_cfg_str == "":
            datasource_affinities = [[card_affinity(d)] for d in range(max_device_id)]
        else:
            datasource_affinities = parse_datasource_config(datasource_cfg_str)

        if device_cfg_str == "":
            datasources_for_devices = list(range(max_device_id))
            device_affinities = [
                [card_affinity(d) + j for j in range(4)] for d in range(max_device_id)
            ]
        else:
            datasources_for_devices, device_affinities = parse_device_config(
                device_cfg_str
            )

        return cls(
            verbosity=verbosity,
            verbosity_server=verbosity_server,
            batch_size=batch_size,
            max_wait=max_wait,
            scheduler_yield_time=scheduler_yield_time,
            dispatch_yield_time=dispatch_yield_time,
            unique_server_id=unique_server_id,
            device_ids=device_ids,
            device_affinities=device_affinities,
            datasource_affinities=datasource_affinities,
            datasources_for_devices=datasources_for_devices,
        )

    def device_affinity(self, device_id: int) -> list[int]:
        return self.device_affinities[device_id]

    def datasource_for_device(self, device: int) -> int:
        return self.datasources_for_devices[device]

    def datasource_affinity(self, datasource_id: int) -> list[int]:
        return self.datasource_affinities[datasource_id]