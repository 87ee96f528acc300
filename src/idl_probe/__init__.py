"""IDL Probe - locate, decode and search fields in IDL-described account data."""

from idl_probe.codec import decode_value, encode_value
from idl_probe.discriminator import DISCRIMINATOR_SIZE, account_discriminator
from idl_probe.errors import (
    AccountNotFoundError,
    BufferTooShortError,
    CyclicTypeError,
    FieldNotFoundError,
    FieldPathError,
    IdlProbeError,
    SchemaParseError,
    TypeNotFoundError,
    UnsupportedTypeError,
    ValueParseError,
)
from idl_probe.layout import FieldLocation, FieldPathResolver, SizeCalculator
from idl_probe.schema import SchemaIndex
from idl_probe.search import (
    AccountRecord,
    Constraint,
    ConstraintSearchEngine,
    MemcmpFilter,
    PathValueConstraint,
    extract_field_value,
)
from idl_probe.types import (
    AccountDefinition,
    EnumDefinition,
    EnumVariantDefinition,
    FieldDefinition,
    FixedArrayRef,
    NamedRef,
    OptionalRef,
    PrimitiveRef,
    PrimitiveType,
    StructDefinition,
    TupleRef,
    TypeRef,
    VariableRef,
)

__all__ = [
    # Main API
    "SchemaIndex",
    "SizeCalculator",
    "FieldPathResolver",
    "FieldLocation",
    "ConstraintSearchEngine",
    "Constraint",
    "PathValueConstraint",
    "MemcmpFilter",
    "AccountRecord",
    "account_discriminator",
    "DISCRIMINATOR_SIZE",
    "decode_value",
    "encode_value",
    "extract_field_value",
    # Type definitions
    "PrimitiveType",
    "TypeRef",
    "PrimitiveRef",
    "VariableRef",
    "FixedArrayRef",
    "TupleRef",
    "OptionalRef",
    "NamedRef",
    "FieldDefinition",
    "StructDefinition",
    "EnumDefinition",
    "EnumVariantDefinition",
    "AccountDefinition",
    # Errors
    "IdlProbeError",
    "SchemaParseError",
    "TypeNotFoundError",
    "AccountNotFoundError",
    "FieldNotFoundError",
    "FieldPathError",
    "UnsupportedTypeError",
    "CyclicTypeError",
    "BufferTooShortError",
    "ValueParseError",
]

__version__ = "0.1.0"
