"""Text <-> little-endian bytes for the primitive types a constraint can target.

Only a subset of the sizable primitives has a codec. The 16-bit, 32-bit,
128-bit and f32 kinds can be located and sized but not decoded or encoded;
requesting them raises UnsupportedTypeError.
"""

from __future__ import annotations

import math
import re
import struct
from decimal import Decimal

import base58

from idl_probe.errors import BufferTooShortError, UnsupportedTypeError, ValueParseError
from idl_probe.types import PrimitiveRef, PrimitiveType, TypeRef

_STRUCT_FORMATS = {
    PrimitiveType.U8: "<B",
    PrimitiveType.U64: "<Q",
    PrimitiveType.I64: "<q",
    PrimitiveType.F64: "<d",
}

_INTEGER_RANGES = {
    PrimitiveType.U8: (0, 2**8 - 1),
    PrimitiveType.U64: (0, 2**64 - 1),
    PrimitiveType.I64: (-(2**63), 2**63 - 1),
}

SUPPORTED_TYPES = frozenset(_STRUCT_FORMATS) | {PrimitiveType.BOOL, PrimitiveType.PUBKEY}

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?|[+-]?(inf|infinity|nan)", re.I)


def _codec_type(type_ref: TypeRef | PrimitiveType) -> PrimitiveType:
    """Return the primitive kind behind ``type_ref`` if it has a codec."""
    if isinstance(type_ref, PrimitiveRef):
        type_ref = type_ref.kind
    if isinstance(type_ref, PrimitiveType) and type_ref in SUPPORTED_TYPES:
        return type_ref
    name = type_ref.value if isinstance(type_ref, PrimitiveType) else str(type_ref)
    raise UnsupportedTypeError(name)


def _format_float(value: float) -> str:
    """Shortest round-trip digits in positional notation: 1.0 -> "1", 1e+100 -> "1000...0"."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _read(data: bytes, offset: int, width: int) -> bytes:
    if offset < 0 or offset + width > len(data):
        raise BufferTooShortError(offset, width, len(data))
    return bytes(data[offset : offset + width])


def decode_value(data: bytes, offset: int, type_ref: TypeRef | PrimitiveType) -> str:
    """Decode the value at ``offset`` into its canonical text form.

    Args:
        data: Raw account data.
        offset: Absolute byte offset of the value.
        type_ref: Declared type of the value.

    Raises:
        UnsupportedTypeError: If the type has no codec.
        BufferTooShortError: If ``data`` ends before the value does.
    """
    kind = _codec_type(type_ref)
    raw = _read(data, offset, kind.size_bytes)

    if kind == PrimitiveType.BOOL:
        return "true" if raw[0] != 0 else "false"
    if kind == PrimitiveType.PUBKEY:
        return base58.b58encode(raw).decode("ascii")

    (value,) = struct.unpack(_STRUCT_FORMATS[kind], raw)
    if kind == PrimitiveType.F64:
        return _format_float(value)
    return str(value)


def encode_value(text: str, type_ref: TypeRef | PrimitiveType) -> bytes:
    """Encode ``text`` into the on-chain bytes for the given type.

    Raises:
        UnsupportedTypeError: If the type has no codec.
        ValueParseError: If ``text`` does not parse as the type.
    """
    kind = _codec_type(type_ref)

    if kind == PrimitiveType.BOOL:
        if text == "true":
            return b"\x01"
        if text == "false":
            return b"\x00"
        raise ValueParseError(text, kind.value)

    if kind == PrimitiveType.PUBKEY:
        try:
            raw = base58.b58decode(text)
        except ValueError as e:
            raise ValueParseError(text, kind.value) from e
        if not text or len(raw) != kind.size_bytes:
            raise ValueParseError(text, kind.value)
        return raw

    if kind == PrimitiveType.F64:
        if not _FLOAT_RE.fullmatch(text):
            raise ValueParseError(text, kind.value)
        return struct.pack(_STRUCT_FORMATS[kind], float(text))

    if not _INTEGER_RE.fullmatch(text):
        raise ValueParseError(text, kind.value)
    value = int(text)
    low, high = _INTEGER_RANGES[kind]
    if not low <= value <= high:
        raise ValueParseError(text, kind.value)
    return struct.pack(_STRUCT_FORMATS[kind], value)
