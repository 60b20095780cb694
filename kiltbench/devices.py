"""Inference devices that move samples between a model and its buffers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Protocol

LARGE_BUFFER = 4_000_000


class Model(Protocol):
    def configure_workload(
        self, data_source: Any, samples: Sequence[Any], in_buffers: list[bytearray]
    ) -> None: ...

    def postprocess_results(
        self, samples: Sequence[Any], out_buffers: list[bytearray]
    ) -> None: ...


class Device(ABC):
    """Something that runs inference on a batch of samples."""

    @abstractmethod
    def inference(self, samples: Sequence[Any]) -> None:
        """Run inference on ``samples``."""


class DummyDevice(Device):
    """A device that fills its inputs and hands its outputs back untouched."""

    def __init__(
        self, model: Model, data_source: Any, input_count: int, output_count: int
    ) -> None:
        self.model = model
        self.data_source = data_source
        self.buffers_in = [bytearray(LARGE_BUFFER) for _ in range(input_count)]
        self.buffers_out = [bytearray(LARGE_BUFFER) for _ in range(output_count)]

    def inference(self, samples: Sequence[Any]) -> None:
        self.model.configure_workload(self.data_source, samples, self.buffers_in)
        self.model.postprocess_results(samples, self.buffers_out)


def create_device(
    model: Model, data_source: Any, input_count: int, output_count: int
) -> Device:
    """Build the device used by this package."""
    return DummyDevice(model, data_source, input_count, output_count)