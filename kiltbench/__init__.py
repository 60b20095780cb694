"""Inference benchmark components: configuration, settings, a dummy device, harness, packing, classification and fp16 helpers."""

__version__ = "0.1.0"