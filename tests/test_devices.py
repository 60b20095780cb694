import pytest

from kiltbench.devices import LARGE_BUFFER, Device, DummyDevice, create_device


class RecordingModel:
    def __init__(self):
        self.calls = []

    def configure_workload(self, data_source, samples, in_buffers):
        self.calls.append(("configure", data_source, list(samples), in_buffers))
        in_buffers[0][0] = 42

    def postprocess_results(self, samples, out_buffers):
        self.calls.append(("postprocess", None, list(samples), out_buffers))


def test_device_is_abstract():
    with pytest.raises(TypeError):
        Device()


def test_create_device_builds_buffers():
    model = RecordingModel()
    device = create_device(model, "source", 2, 3)
    assert isinstance(device, DummyDevice)
    assert len(device.buffers_in) == 2
    assert len(device.buffers_out) == 3
    assert all(len(b) == LARGE_BUFFER for b in device.buffers_in + device.buffers_out)


def test_inference_calls_model_in_order():
    model = RecordingModel()
    device = DummyDevice(model, "source", 1, 1)
    device.inference(["a", "b"])
    assert [c[0] for c in model.calls] == ["configure", "postprocess"]
    assert model.calls[0][1] == "source"
    assert model.calls[0][2] == ["a", "b"]
    assert model.calls[0][3] is device.buffers_in
    assert model.calls[1][3] is device.buffers_out
    assert device.buffers_in[0][0] == 42


def test_buffers_are_reused_between_calls():
    model = RecordingModel()
    device = DummyDevice(model, None, 1, 1)
    device.inference([1])
    device.inference([2])
    assert model.calls[0][3] is model.calls[2][3]
    assert len(model.calls) == 4