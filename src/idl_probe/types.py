"""Type definitions for IDL-described account layouts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PrimitiveType(Enum):
    """Fixed-width primitive types an IDL field can declare."""

    U8 = "u8"
    I8 = "i8"
    U16 = "u16"
    I16 = "i16"
    U32 = "u32"
    I32 = "i32"
    U64 = "u64"
    I64 = "i64"
    U128 = "u128"
    I128 = "i128"
    F32 = "f32"
    F64 = "f64"
    BOOL = "bool"
    PUBKEY = "publicKey"

    @property
    def size_bytes(self) -> int:
        """Return the size in bytes for this primitive type."""
        sizes = {
            PrimitiveType.U8: 1,
            PrimitiveType.I8: 1,
            PrimitiveType.U16: 2,
            PrimitiveType.I16: 2,
            PrimitiveType.U32: 4,
            PrimitiveType.I32: 4,
            PrimitiveType.U64: 8,
            PrimitiveType.I64: 8,
            PrimitiveType.U128: 16,
            PrimitiveType.I128: 16,
            PrimitiveType.F32: 4,
            PrimitiveType.F64: 8,
            PrimitiveType.BOOL: 1,
            PrimitiveType.PUBKEY: 32,
        }
        return sizes[self]


# Mapping from IDL spellings to PrimitiveType values
PRIMITIVE_TYPE_NAMES: dict[str, PrimitiveType] = {pt.value: pt for pt in PrimitiveType}
PRIMITIVE_TYPE_NAMES["pubkey"] = PrimitiveType.PUBKEY

# Spellings of length-prefixed types whose size is only known per record
VARIABLE_TYPE_NAMES = frozenset({"string", "bytes"})


class OptionKind(Enum):
    """The two optional encodings an IDL can declare."""

    OPTION = "option"
    COPTION = "coption"


class TypeRef:
    """Base class for a reference to a type as written in a field declaration."""

    pass


@dataclass(frozen=True)
class PrimitiveRef(TypeRef):
    """A fixed-width primitive."""

    kind: PrimitiveType

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class VariableRef(TypeRef):
    """A length-prefixed type (string, bytes, vec) with no static size."""

    name: str
    element: TypeRef | None = None

    def __str__(self) -> str:
        if self.element is not None:
            return f"vec<{self.element}>"
        return self.name


@dataclass(frozen=True)
class FixedArrayRef(TypeRef):
    """An array of ``length`` elements stored inline."""

    element: TypeRef
    length: int

    def __str__(self) -> str:
        return f"[{self.element}; {self.length}]"


@dataclass(frozen=True)
class TupleRef(TypeRef):
    """An ordered group of types stored back to back."""

    elements: tuple[TypeRef, ...]

    def __str__(self) -> str:
        return "(" + ", ".join(str(e) for e in self.elements) + ")"


@dataclass(frozen=True)
class OptionalRef(TypeRef):
    """An optional value; ``option`` and ``coption`` share a layout."""

    inner: TypeRef
    kind: OptionKind = OptionKind.OPTION

    def __str__(self) -> str:
        return f"{self.kind.value}<{self.inner}>"


@dataclass(frozen=True)
class NamedRef(TypeRef):
    """A reference to a type declared in the IDL ``types`` section."""

    type_name: str

    def __str__(self) -> str:
        return self.type_name


@dataclass(frozen=True)
class FieldDefinition:
    """A named, typed field. Declaration order determines byte offset."""

    name: str
    type_ref: TypeRef


@dataclass(frozen=True)
class StructDefinition:
    """A struct type: fields laid out contiguously in declared order."""

    name: str
    fields: tuple[FieldDefinition, ...] = ()


@dataclass(frozen=True)
class EnumVariantDefinition:
    """A single variant within an enum type. Unit variants have no fields."""

    name: str
    fields: tuple[FieldDefinition, ...] = ()


@dataclass(frozen=True)
class EnumDefinition:
    """A tagged union: one discriminant byte followed by the variant payload."""

    name: str
    variants: tuple[EnumVariantDefinition, ...] = ()

    DISCRIMINANT_SIZE = 1


TypeDefinition = StructDefinition | EnumDefinition


@dataclass(frozen=True)
class AccountDefinition:
    """An account (record) type declared in the IDL ``accounts`` section."""

    name: str
    fields: tuple[FieldDefinition, ...] = ()
