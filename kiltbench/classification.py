"""Image classification benchmark: data source, settings and model glue."""

from __future__ import annotations

import logging
import struct
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np

from kiltbench.config_tools import ConfigError, ConfigReader, get_int, get_str
from kiltbench.harness import QuerySample, QuerySampleResponse

logger = logging.getLogger(__name__)

_FLOAT = struct.Struct("<f")


class IOType(Enum):
    """Element types of model inputs and outputs."""

    FLOAT32 = "float32"
    INT8 = "int8"
    INT32 = "int32"
    INT64 = "int64"
    UINT8 = "uint8"
    UINT32 = "uint32"
    UINT64 = "uint64"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)


@dataclass(frozen=True)
class ClassificationDataSourceConfig:
    """Settings of the preprocessed ImageNet data set."""

    image_size: int
    has_background_class: bool
    available_images_file: str
    dataset_dir: str
    max_images_in_memory: int
    image_filenames: tuple[str, ...] = field(default_factory=tuple)
    num_channels: int = 3

    @property
    def image_pixels(self) -> int:
        """Number of elements in one preprocessed image."""
        return self.image_size * self.image_size * self.num_channels

    @classmethod
    def from_reader(cls, reader: ConfigReader) -> "ClassificationDataSourceConfig":
        image_size = get_int(
            reader, "KILT_DATASET_IMAGENET_PREPROCESSED_INPUT_SQUARE_SIDE"
        )
        has_background_class = (
            get_str(reader, "KILT_DATASET_IMAGENET_HAS_BACKGROUND_CLASS") == "YES"
        )
        available_images_file = get_str(
            reader, "KILT_DATASET_IMAGENET_PREPROCESSED_SUBSET_FOF"
        )
        dataset_dir = get_str(reader, "KILT_DATASET_IMAGENET_PREPROCESSED_DIR")
        max_images_in_memory = get_int(reader, "LOADGEN_BUFFER_SIZE")

        try:
            text = Path(available_images_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(
                "Unable to open the available image list file "
                + available_images_file
            ) from exc
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        logger.info("Number of available imagefiles: %d", len(lines))

        return cls(
            image_size=image_size,
            has_background_class=has_background_class,
            available_images_file=available_images_file,
            dataset_dir=dataset_dir,
            max_images_in_memory=max_images_in_memory,
            image_filenames=tuple(lines),
        )


class ResNet50Model:
    """Copies images into the device input and reports the predicted classes."""

    def __init__(
        self,
        datasource_cfg: ClassificationDataSourceConfig,
        input_dtype: Any,
        output_dtype: Any,
        complete: Callable[[list[QuerySampleResponse]], None],
    ) -> None:
        self.datasource_cfg = datasource_cfg
        self.input_dtype = np.dtype(input_dtype)
        self.output_dtype = np.dtype(output_dtype)
        self._complete = complete

    def configure_workload(
        self,
        data_source: "ResNet50DataSource",
        samples: Sequence[QuerySample],
        in_buffer: Any,
    ) -> None:
        """Copy each sample's image into consecutive slots of ``in_buffer``."""
        size = self.datasource_cfg.image_pixels
        dest = np.frombuffer(in_buffer, dtype=self.input_dtype, count=len(samples) * size)
        for slot, sample in enumerate(samples):
            src = np.asarray(data_source.sample(sample.index)).reshape(-1)
            dest[slot * size : (slot + 1) * size] = src[:size]

    def postprocess_results(
        self, samples: Sequence[QuerySample], out_buffer: Any
    ) -> None:
        """Report one class per sample, shifted down if there is a background class."""
        probe_offset = 1 if self.datasource_cfg.has_background_class else 0
        classes = np.frombuffer(out_buffer, dtype=self.output_dtype, count=len(samples))
        responses = [
            QuerySampleResponse(
                id=sample.id,
                data=_FLOAT.pack(float(np.float32(value)) - probe_offset),
            )
            for sample, value in zip(samples, classes)
        ]
        self._complete(responses)


class ResNet50DataSource:
    """Keeps preprocessed images in memory, grouped in batch-sized blocks."""

    def __init__(
        self,
        datasource_cfg: ClassificationDataSourceConfig,
        batch_size: int,
        dtype: Any,
        verbosity: int = 0,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch size must be positive")
        self.datasource_cfg = datasource_cfg
        self.batch_size = batch_size
        self.dtype = np.dtype(dtype)
        self.verbosity = verbosity
        self.idx2loc: dict[int, int] = {}
        self._filenames: list[str] = []
        self._samples: list[np.ndarray] = []

    def load_filenames(self, indices: Sequence[int]) -> list[str]:
        """Resolve sample indices to image file names and remember their order."""
        available = self.datasource_cfg.image_filenames
        filenames: list[str] = []
        idx2loc: dict[int, int] = {}
        for idx in indices:
            if not 0 <= idx < len(available):
                raise IndexError(
                    f"Trying to load filename[{idx}] when only "
                    f"{len(available)} images are available"
                )
            filenames.append(available[idx])
            idx2loc[idx] = len(filenames) - 1
        self._filenames = filenames
        self.idx2loc = idx2loc
        return list(filenames)

    def load_samples(self, indices: Sequence[int]) -> None:
        """Read the images for ``indices`` into memory."""
        self.load_filenames(indices)
        size = self.datasource_cfg.image_pixels
        samples: list[np.ndarray] = []
        for start in range(0, len(self._filenames), self.batch_size):
            block = np.zeros((self.batch_size, size), dtype=self.dtype)
            names = self._filenames[start : start + self.batch_size]
            for row, name in zip(block, names):
                self._load_file(f"{self.datasource_cfg.dataset_dir}/{name}", row)
                samples.append(row)
        self._samples = samples

    def _load_file(self, path: str, row: np.ndarray) -> None:
        try:
            with open(path, "rb") as file:
                data = file.read(row.nbytes)
        except OSError as exc:
            raise OSError(f"Failed to open image data {path}") from exc
        if len(data) < row.nbytes:
            logger.error("error: only %d could be read", len(data))
        row.view(np.uint8)[: len(data)] = np.frombuffer(data, dtype=np.uint8)
        if self.verbosity > 1:
            sys.stdout.write(f"Loaded file: {path}\n")
        elif self.verbosity:
            sys.stdout.write("l")
            sys.stdout.flush()

    def unload_samples(self, indices: Sequence[int]) -> None:
        """Release the images loaded by the last :meth:`load_samples`."""
        self._samples = []
        self.idx2loc = {}

    def sample(self, index: int) -> np.ndarray:
        """Return the loaded image for sample ``index``."""
        try:
            return self._samples[self.idx2loc[index]]
        except (KeyError, IndexError):
            raise KeyError(f"sample {index} is not loaded") from None

    def available_sample_count(self) -> int:
        return len(self.datasource_cfg.image_filenames)

    def max_samples_in_memory(self) -> int:
        return self.datasource_cfg.max_images_in_memory


_SUPPORTED = {
    (IOType.FLOAT32, IOType.FLOAT32),
    (IOType.FLOAT32, IOType.INT64),
    (IOType.UINT8, IOType.INT64),
}


def _check_types(input_type: IOType, output_type: IOType, what: str) -> None:
    if (IOType(input_type), IOType(output_type)) not in _SUPPORTED:
        raise ValueError(
            f"Input/output types not supported when constructing {what}"
        )


def model_construct(
    datasource_cfg: ClassificationDataSourceConfig,
    input_type: IOType,
    output_type: IOType,
    complete: Callable[[list[QuerySampleResponse]], None],
) -> ResNet50Model:
    """Build the model for a supported pair of input and output types."""
    _check_types(input_type, output_type, "model")
    return ResNet50Model(
        datasource_cfg, IOType(input_type).dtype, IOType(output_type).dtype, complete
    )


def data_source_construct(
    datasource_cfg: ClassificationDataSourceConfig,
    batch_size: int,
    input_type: IOType,
    output_type: IOType,
    verbosity: int = 0,
) -> ResNet50DataSource:
    """Build the data source for a supported pair of input and output types."""
    _check_types(input_type, output_type, "datasource")
    return ResNet50DataSource(
        datasource_cfg, batch_size, IOType(input_type).dtype, verbosity
    )