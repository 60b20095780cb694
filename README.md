# kiltbench

Building blocks for running inference benchmarks: configuration readers,
server, device and harness settings, a dummy inference device, the
load-generator side of a harness, variable-length sequence packing, an image
classification workload and exact IEEE half-precision conversions.

The package is a library. It has no command-line entry point; you wire the
pieces together from Python.

## Configuration

Settings come from a reader, an object with a `get(name)` method that
returns the raw string or `None`.

- `EnvConfigReader(environ)` looks values up in a mapping; with `None` it
  uses `os.environ`.
- `JsonConfigReader(data)` looks values up in a JSON object. Strings are
  returned as they are, booleans as `"true"`/`"false"`, numbers as their
  integer value. `JsonConfigReader.from_file(path)` loads the object from a
  file.

Every lookup is logged at INFO level as `CFG: NAME = value`.

The helpers in `kiltbench.config_tools` turn raw values into typed settings:

```python
import os
from kiltbench.config_tools import EnvConfigReader, get_int, get_opt_str, alter_int

reader = EnvConfigReader(os.environ)
verbosity = get_int(reader, "KILT_VERBOSE")
model_name = get_opt_str(reader, "KILT_MODEL_NAME", "unknown_model")
max_wait = alter_int(reader.get("KILT_MAX_WAIT_ABS"), 100000)
```

`get_str`, `get_int` and `get_float` raise `ConfigError` when the setting is
missing. `get_opt_str` and `get_opt_bool` fall back to a default, and
`get_bool` treats a missing setting as false. The words `YES`, `yes`, `ON`,
`on`, `1` and `true` count as true. `atoi` and `atof` parse a leading number
the way C does and give 0 when there is none; `alter_str`, `alter_int` and
`alter_float` apply a default when a value is unset.

## Settings objects

Each of these is built with `from_reader`:

- `kiltbench.harness.HarnessConfig`: load-generator configuration paths,
  model name, scenario, mode, verbosity and the cold-run flag.
- `kiltbench.server_config.ServerConfig`: verbosity, batch size, wait and
  yield times, the unique server id, and the device and data source core
  affinities. `from_reader(reader, card_affinity)` takes a function that
  gives the first core of a card. It uses that function to work out default
  affinities when `KILT_DEVICE_CONFIG` or `KILT_DATASOURCE_CONFIG` is not
  set.
- `kiltbench.device_config.DummyDeviceConfig`, `OnnxDeviceConfig` and
  `TensorRTDeviceConfig`: the settings for each kind of device.
- `kiltbench.classification.ClassificationDataSourceConfig`: the
  preprocessed image data set. It reads the list of image file names when it
  is built and raises `ConfigError` if that file cannot be opened.

Device and data source layouts can also be parsed on their own:

```python
from kiltbench.server_config import (
    parse_int_list,
    parse_datasource_config,
    parse_device_config,
)

parse_int_list("0,1,2")                # [0, 1, 2]
parse_datasource_config("0,1:2,3")     # [[0, 1], [2, 3]]
parse_device_config("0,4,5:1,6,7")     # ([0, 1], [[4, 5], [6, 7]])
```

## Harness

`kiltbench.harness` provides the load-generator side:

- `QuerySample` and `QuerySampleResponse`.
- `TestScenario` and `TestMode`, with `parse_scenario` and `parse_mode`.
  An unknown scenario means `SINGLE_STREAM`. An empty mode means unset, and
  an unknown mode means `SUBMISSION_RUN`.
- `build_test_settings(cfg)`, which turns a `HarnessConfig` into
  `TestSettings`.
- `SystemUnderTest(kil, cfg, out)` and `SampleLibrary(kil)`. These pass
  queries and sample loading on to an inference library object. That object
  provides `inference`, `unique_server_id`, `available_samples_max`,
  `samples_in_memory_max`, `load_next_batch` and `unload_batch`.

## Devices

`kiltbench.devices.create_device(model, data_source, input_count,
output_count)` builds a `DummyDevice` with 4,000,000-byte input and output
buffers. On `inference(samples)` it asks the model to fill the input buffers
from the data source. It then hands the output buffers to the model's
`postprocess_results`. No computation takes place in between, so it is
useful for exercising a workload without accelerator hardware.

## Sequence packing

`kiltbench.pack.pack(samples, max_seq_len, max_seq_per_pack)` takes
`(item, length)` pairs and groups them into packs. The total length of each
pack fits in `max_seq_len`, and each pack holds at most `max_seq_per_pack`
samples. Every sample ends up in exactly one pack. `histify` groups samples
by length and raises `ValueError` for a length outside `1..max_seq_len`.

## Image classification

`kiltbench.classification` holds the image classification workload:

- `ResNet50DataSource` loads preprocessed images into memory in batch-sized
  blocks and returns them by sample index.
- `ResNet50Model` copies images into a device input buffer. It then reports
  one class per sample as a 4-byte float `QuerySampleResponse`, shifted down
  by one when the data set has a background class.
- `model_construct` and `data_source_construct` accept the type pairs
  (`FLOAT32`, `FLOAT32`), (`FLOAT32`, `INT64`) and (`UINT8`, `INT64`) of
  `IOType`, and raise `ValueError` for any other pair.

## Half precision

```python
from kiltbench.fp16 import fp16_ieee_from_fp32_value, fp16_ieee_to_fp32_value

bits = fp16_ieee_from_fp32_value(1.5)   # 0x3E00
value = fp16_ieee_to_fp32_value(bits)   # 1.5
```

The conversions work on bit patterns. They round to nearest even and keep
infinities, signed zeros and subnormals; a NaN becomes a quiet NaN.
`fp16_ieee_to_fp32_bits` does the widening with integer operations only.
`fp32_to_bits` and `fp32_from_bits` move between single-precision values and
their bit patterns.

## What the package does not do

- It has no command-line program and does not drive a load generator
  itself. You call `SystemUnderTest` and `SampleLibrary` from your own code.
- It runs no real inference. The only device is `DummyDevice`. The ONNX and
  TensorRT classes hold settings only.
- It has no network server or client, and no model glue for BERT-style
  question answering or object detection. `pack` is the only part of that
  workload that is included.
- It supports only the IEEE half-precision format, not the ARM alternative
  format.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.