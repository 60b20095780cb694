"""Settings for the inference devices."""

from __future__ import annotations

from dataclasses import dataclass

from kiltbench.config_tools import ConfigReader, alter_int, alter_str, get_str

DEFAULT_PLUGINS_PATH = "../kilt-mlperf-dev/plugins/libnmsoptplugin.so"


@dataclass(frozen=True)
class DummyDeviceConfig:
    """Settings for the device that performs no computation."""

    model_root: str | None

    @classmethod
    def from_reader(cls, reader: ConfigReader) -> "DummyDeviceConfig":
        return cls(model_root=reader.get("KILT_MODEL_ROOT"))


@dataclass(frozen=True)
class OnnxDeviceConfig:
    """Settings for the ONNX runtime device."""

    model_root: str
    backend_type: str

    @classmethod
    def from_reader(cls, reader: ConfigReader) -> "OnnxDeviceConfig":
        return cls(
            model_root=get_str(reader, "KILT_MODEL_ROOT"),
            backend_type=get_str(reader, "KILT_BACKEND_TYPE"),
        )


@dataclass(frozen=True)
class TensorRTDeviceConfig:
    """Settings for the TensorRT device."""

    model_root: str = ""
    number_of_streams: int = 1
    max_seq_len: int = 384
    max_batch_size: int = 256
    input_memory_management_strategy_name: str = "DEFAULT"
    output_memory_management_strategy_name: str = "DEFAULT"
    plugins_path: str = DEFAULT_PLUGINS_PATH

    @classmethod
    def from_reader(cls, reader: ConfigReader) -> "TensorRTDeviceConfig":
        return cls(
            model_root=alter_str(reader.get("KILT_MODEL_ROOT"), ""),
            number_of_streams=alter_int(
                reader.get("KILT_DEVICE_TENSORRT_NUMBER_OF_STREAMS"), 1
            ),
            max_seq_len=alter_int(
                reader.get("KILT_DATASET_SQUAD_TOKENIZED_MAX_SEQ_LENGTH"), 384
            ),
            max_batch_size=alter_int(
                reader.get("KILT_DEVICE_TENSORRT_BATCH_SIZE"), 256
            ),
            input_memory_management_strategy_name=alter_str(
                reader.get("KILT_DEVICE_TENSORRT_INPUT_MEMORY_MANAGEMENT_STRATEGY"),
                "DEFAULT",
            ),
            output_memory_management_strategy_name=alter_str(
                reader.get("KILT_DEVICE_TENSORRT_OUTPUT_MEMORY_MANAGEMENT_STRATEGY"),
                "DEFAULT",
            ),
            plugins_path=alter_str(
                reader.get("KILT_DEVICE_TENSORRT_PLUGINS_PATH"), DEFAULT_PLUGINS_PATH
            ),
        )