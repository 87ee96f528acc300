"""Static byte layout of IDL types: sizes and field offsets."""

from __future__ import annotations

from typing import NamedTuple

from loguru import logger

from idl_probe.discriminator import DISCRIMINATOR_SIZE
from idl_probe.errors import CyclicTypeError, FieldNotFoundError, UnsupportedTypeError
from idl_probe.parsing import parse_field_path
from idl_probe.schema import SchemaIndex
from idl_probe.types import (
    EnumDefinition,
    FieldDefinition,
    FixedArrayRef,
    NamedRef,
    OptionalRef,
    PrimitiveRef,
    StructDefinition,
    TupleRef,
    TypeRef,
    VariableRef,
)

# Nesting bound for named type resolution
MAX_TYPE_DEPTH = 64


class SizeCalculator:
    """Computes the fixed byte width of types declared against a SchemaIndex.

    Named types are resolved through the index with an explicit chain of the
    names currently being sized, so a type that contains itself fails with
    CyclicTypeError instead of recursing without bound.
    """

    def __init__(self, schema: SchemaIndex) -> None:
        self.schema = schema

    def size_of(self, type_ref: TypeRef) -> int:
        """Return the byte width of ``type_ref``.

        Raises:
            UnsupportedTypeError: If the type, or anything it contains, is variable-length.
            TypeNotFoundError: If a named type is not declared.
            CyclicTypeError: If a named type contains itself.
        """
        return self._size_of(type_ref, ())

    def size_of_fields(self, fields: tuple[FieldDefinition, ...]) -> int:
        """Return the summed width of a field list."""
        return self._size_of_fields(fields, ())

    def _size_of_fields(self, fields: tuple[FieldDefinition, ...], chain: tuple[str, ...]) -> int:
        return sum(self._size_of(f.type_ref, chain) for f in fields)

    def _size_of(self, type_ref: TypeRef, chain: tuple[str, ...]) -> int:
        if isinstance(type_ref, PrimitiveRef):
            return type_ref.kind.size_bytes
        if isinstance(type_ref, FixedArrayRef):
            return self._size_of(type_ref.element, chain) * type_ref.length
        if isinstance(type_ref, TupleRef):
            return sum(self._size_of(e, chain) for e in type_ref.elements)
        if isinstance(type_ref, OptionalRef):
            # Presence tag is not counted: the inner width is used as-is
            return self._size_of(type_ref.inner, chain)
        if isinstance(type_ref, NamedRef):
            return self._size_of_named(type_ref.type_name, chain)
        if isinstance(type_ref, VariableRef):
            raise UnsupportedTypeError(
                str(type_ref), f"Dynamic size unsupported for type '{type_ref}'"
            )
        raise UnsupportedTypeError(str(type_ref))

    def _size_of_named(self, name: str, chain: tuple[str, ...]) -> int:
        if name in chain:
            raise CyclicTypeError([*chain, name])
        if len(chain) >= MAX_TYPE_DEPTH:
            raise CyclicTypeError([*chain, name])

        type_def = self.schema.get_type(name)
        chain = (*chain, name)

        if isinstance(type_def, StructDefinition):
            return self._size_of_fields(type_def.fields, chain)
        if isinstance(type_def, EnumDefinition):
            largest = max(
                (self._size_of_fields(v.fields, chain) for v in type_def.variants),
                default=0,
            )
            return EnumDefinition.DISCRIMINANT_SIZE + largest
        raise UnsupportedTypeError(name)


class FieldLocation(NamedTuple):
    """Absolute position of a field inside an account's data."""

    offset: int
    type_ref: TypeRef


class FieldPathResolver:
    """Resolves dotted field paths to absolute byte offsets within account data."""

    def __init__(self, schema: SchemaIndex, sizes: SizeCalculator | None = None) -> None:
        self.schema = schema
        self.sizes = sizes or SizeCalculator(schema)

    def resolve(self, account_name: str, path: str) -> FieldLocation:
        """Locate the field at ``path`` inside ``account_name`` records.

        The offset counts the 8-byte discriminator that starts every account.
        Nested fields continue the running offset of their parent: a nested
        struct occupies the bytes right after its preceding siblings.

        Args:
            account_name: Name of an account declared in the IDL.
            path: Dotted field path, e.g. ``"pricing.tradeImpactFeeScalar"``.

        Returns:
            The field's absolute offset and declared type.

        Raises:
            AccountNotFoundError: If the account is not declared.
            FieldNotFoundError: If a path segment matches no field.
            UnsupportedTypeError: If a preceding field is variable-length or
                an intermediate segment is not a struct.
        """
        account = self.schema.get_account(account_name)
        segments = parse_field_path(path)

        offset = DISCRIMINATOR_SIZE
        fields = account.fields
        last = len(segments) - 1

        for i, segment in enumerate(segments):
            index = next((j for j, f in enumerate(fields) if f.name == segment), None)
            if index is None:
                raise FieldNotFoundError(segment)

            # Fields before the match occupy the bytes in front of it
            offset += self.sizes.size_of_fields(fields[:index])
            matched = fields[index]

            if i == last:
                logger.debug(f"Resolved {account_name}.{path} to offset {offset} ({matched.type_ref})")
                return FieldLocation(offset, matched.type_ref)

            fields = self._nested_fields(matched)

        # parse_field_path never returns an empty list
        raise FieldNotFoundError(path)

    def _nested_fields(self, f: FieldDefinition) -> tuple[FieldDefinition, ...]:
        if isinstance(f.type_ref, NamedRef):
            type_def = self.schema.get_type(f.type_ref.type_name)
            if isinstance(type_def, StructDefinition):
                return type_def.fields
        raise UnsupportedTypeError(
            str(f.type_ref), f"Field '{f.name}' of type '{f.type_ref}' is not a nested struct"
        )
