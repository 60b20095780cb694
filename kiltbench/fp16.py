"""IEEE half-precision <-> single-precision conversions done on bit patterns."""

from __future__ import annotations

import math
import struct

_MASK32 = 0xFFFFFFFF


def _to_f32(value: float) -> float:
    """Round a Python float to the nearest single-precision value."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _int32(value: int) -> int:
    """Reinterpret the low 32 bits of ``value`` as a signed integer."""
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def _clz32(value: int) -> int:
    return 32 - (value & _MASK32).bit_length()


def fp32_to_bits(value: float) -> int:
    """Return the 32-bit pattern of ``value`` rounded to single precision."""
    return struct.unpack("<I", struct.pack("<f", _to_f32(value)))[0]


def fp32_from_bits(bits: int) -> float:
    """Return the single-precision value whose bit pattern is ``bits``."""
    return struct.unpack("<f", struct.pack("<I", bits & _MASK32))[0]


def fp16_ieee_to_fp32_bits(h: int) -> int:
    """Convert half-precision bits to single-precision bits using integer ops only."""
    w = (h & 0xFFFF) << 16
    sign = w & 0x80000000
    nonsign = w & 0x7FFFFFFF

    renorm_shift = _clz32(nonsign)
    renorm_shift = renorm_shift - 5 if renorm_shift > 5 else 0

    inf_nan_mask = (_int32(nonsign + 0x04000000) >> 8) & 0x7F800000
    zero_mask = _int32(nonsign - 1) >> 31

    shifted = ((nonsign << renorm_shift) & _MASK32) >> 3
    exponent_adjust = ((0x70 - renorm_shift) << 23) & _MASK32
    body = (((shifted + exponent_adjust) & _MASK32) | inf_nan_mask) & ~zero_mask
    return (sign | body) & _MASK32


def fp16_ieee_to_fp32_value(h: int) -> float:
    """Convert half-precision bits to a single-precision value."""
    w = (h & 0xFFFF) << 16
    sign = w & 0x80000000
    two_w = (w + w) & _MASK32

    exp_offset = 0xE0 << 23
    exp_scale = 2.0**-112
    normalized_value = _to_f32(
        fp32_from_bits((two_w >> 4) + exp_offset) * exp_scale
    )

    magic_mask = 126 << 23
    magic_bias = 0.5
    denormalized_value = _to_f32(
        fp32_from_bits((two_w >> 17) | magic_mask) - magic_bias
    )

    denormalized_cutoff = 1 << 27
    chosen = denormalized_value if two_w < denormalized_cutoff else normalized_value
    return fp32_from_bits(sign | fp32_to_bits(chosen))


def fp16_ieee_from_fp32_value(f: float) -> int:
    """Convert a value to half-precision bits, rounding to nearest even."""
    f = _to_f32(f)
    scale_to_inf = 2.0**112
    scale_to_zero = 2.0**-110
    base = _to_f32(_to_f32(abs(f) * scale_to_inf) * scale_to_zero)

    w = fp32_to_bits(f)
    shl1_w = (w + w) & _MASK32
    sign = w & 0x80000000
    bias = shl1_w & 0xFF000000
    if bias < 0x71000000:
        bias = 0x71000000

    base = _to_f32(fp32_from_bits((bias >> 1) + 0x07800000) + base)
    bits = fp32_to_bits(base)
    exp_bits = (bits >> 13) & 0x00007C00
    mantissa_bits = bits & 0x00000FFF
    nonsign = exp_bits + mantissa_bits
    return ((sign >> 16) | (0x7E00 if shl1_w > 0xFF000000 else nonsign)) & 0xFFFF