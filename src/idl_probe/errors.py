"""Exceptions raised while resolving, decoding and searching account data."""

from __future__ import annotations


class IdlProbeError(Exception):
    """Base exception for all idl_probe errors."""

    pass


class SchemaParseError(IdlProbeError):
    """Raised when the IDL document is malformed or missing required sections."""

    pass


class TypeNotFoundError(IdlProbeError):
    """Raised when a named type is not declared in the IDL."""

    def __init__(self, type_name: str, message: str | None = None) -> None:
        self.type_name = type_name
        super().__init__(message or f"Unknown type: {type_name}")


class AccountNotFoundError(TypeNotFoundError):
    """Raised when an account name is not declared in the IDL."""

    def __init__(self, account_name: str) -> None:
        super().__init__(account_name, f"Account not found in IDL: {account_name}")


class FieldNotFoundError(IdlProbeError):
    """Raised when a path segment matches no field."""

    def __init__(self, segment: str, message: str | None = None) -> None:
        self.segment = segment
        super().__init__(message or f"Field not found: {segment}")


class FieldPathError(FieldNotFoundError):
    """Raised when a field path or constraint expression is malformed."""

    def __init__(self, text: str, detail: str) -> None:
        super().__init__(text, f"Malformed field path '{text}': {detail}")


class UnsupportedTypeError(IdlProbeError):
    """Raised when a type has no static size or no codec."""

    def __init__(self, type_name: str, message: str | None = None) -> None:
        self.type_name = type_name
        super().__init__(message or f"Unsupported type: {type_name}")


class CyclicTypeError(IdlProbeError):
    """Raised when a type definition contains itself."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__(f"Cyclic type: {' -> '.join(chain)}")


class BufferTooShortError(IdlProbeError):
    """Raised when record bytes end before a value at some offset."""

    def __init__(self, offset: int, width: int, length: int) -> None:
        self.offset = offset
        self.width = width
        self.length = length
        super().__init__(
            f"Buffer too short: need {width} bytes at offset {offset}, have {length}"
        )


class ValueParseError(IdlProbeError):
    """Raised when a text value does not parse as the target type."""

    def __init__(self, value: str, type_name: str) -> None:
        self.value = value
        self.type_name = type_name
        super().__init__(f"Failed to parse '{value}' as {type_name}")
