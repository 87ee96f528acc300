"""Index of the types and accounts declared in an IDL document."""

from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from idl_probe.errors import AccountNotFoundError, SchemaParseError, TypeNotFoundError
from idl_probe.types import (
    PRIMITIVE_TYPE_NAMES,
    VARIABLE_TYPE_NAMES,
    AccountDefinition,
    EnumDefinition,
    EnumVariantDefinition,
    FieldDefinition,
    FixedArrayRef,
    NamedRef,
    OptionalRef,
    OptionKind,
    PrimitiveRef,
    StructDefinition,
    TupleRef,
    TypeDefinition,
    TypeRef,
    VariableRef,
)


def parse_type_ref(raw: Any, where: str = "field") -> TypeRef:
    """Convert a JSON type expression into a TypeRef.

    Args:
        raw: The ``type`` value of a field, e.g. ``"u64"`` or ``{"array": ["u8", 32]}``.
        where: Description of the owning declaration, used in error messages.

    Returns:
        The parsed TypeRef.

    Raises:
        SchemaParseError: If the expression is not a recognised form.
    """
    if isinstance(raw, str):
        primitive = PRIMITIVE_TYPE_NAMES.get(raw)
        if primitive is not None:
            return PrimitiveRef(primitive)
        if raw in VARIABLE_TYPE_NAMES:
            return VariableRef(raw)
        return NamedRef(raw)

    if not isinstance(raw, dict) or len(raw) != 1:
        raise SchemaParseError(f"Invalid type expression in {where}: {raw!r}")

    ((key, value),) = raw.items()

    if key == "array":
        if not isinstance(value, list) or len(value) != 2:
            raise SchemaParseError(f"Array type in {where} must be [type, length]")
        length = value[1]
        if isinstance(length, bool) or not isinstance(length, int) or length < 0:
            raise SchemaParseError(f"Array length in {where} is invalid: {length!r}")
        return FixedArrayRef(parse_type_ref(value[0], where), length)

    if key == "tuple":
        if not isinstance(value, list):
            raise SchemaParseError(f"Tuple elements in {where} must be an array")
        return TupleRef(tuple(parse_type_ref(e, where) for e in value))

    if key in ("option", "coption"):
        return OptionalRef(parse_type_ref(value, where), OptionKind(key))

    if key == "vec":
        return VariableRef("vec", parse_type_ref(value, where))

    if key == "defined":
        # Newer IDLs wrap the name: {"defined": {"name": "Pricing"}}
        if isinstance(value, dict):
            value = value.get("name")
        if not isinstance(value, str):
            raise SchemaParseError(f"Invalid 'defined' type in {where}")
        return NamedRef(value)

    raise SchemaParseError(f"Unsupported type expression in {where}: {key!r}")


def _parse_fields(raw_fields: Any, where: str) -> tuple[FieldDefinition, ...]:
    """Parse a field list. Positional (unnamed) entries are named by index."""
    if not isinstance(raw_fields, list):
        raise SchemaParseError(f"'fields' of {where} is not an array")

    fields: list[FieldDefinition] = []
    for i, raw in enumerate(raw_fields):
        if isinstance(raw, dict) and "name" in raw:
            name = raw["name"]
            if not isinstance(name, str):
                raise SchemaParseError(f"Field {i} of {where} has a non-string name")
            if "type" not in raw:
                raise SchemaParseError(f"Field '{name}' of {where} has no type")
            fields.append(FieldDefinition(name, parse_type_ref(raw["type"], f"{where}.{name}")))
        else:
            fields.append(FieldDefinition(str(i), parse_type_ref(raw, f"{where}.{i}")))
    return tuple(fields)


def _parse_type_definition(entry: Any) -> TypeDefinition:
    """Parse one entry of the ``types`` section."""
    if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
        raise SchemaParseError(f"Type entry has no name: {entry!r}")
    name = entry["name"]

    body = entry.get("type")
    if not isinstance(body, dict):
        raise SchemaParseError(f"Type '{name}' does not contain 'type'")

    kind = body.get("kind")
    if kind == "struct":
        if "fields" not in body:
            raise SchemaParseError(f"Struct '{name}' does not contain 'fields'")
        return StructDefinition(name, _parse_fields(body["fields"], name))

    if kind == "enum":
        raw_variants = body.get("variants")
        if not isinstance(raw_variants, list):
            raise SchemaParseError(f"Enum '{name}' does not contain 'variants'")
        variants = []
        for raw in raw_variants:
            if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
                raise SchemaParseError(f"Enum '{name}' has a variant without a name")
            where = f"{name}::{raw['name']}"
            variants.append(
                EnumVariantDefinition(raw["name"], _parse_fields(raw.get("fields") or [], where))
            )
        return EnumDefinition(name, tuple(variants))

    raise SchemaParseError(f"Type '{name}' has unsupported kind: {kind!r}")


class SchemaIndex:
    """Read-only lookup of the types and accounts declared in an IDL document."""

    def __init__(
        self,
        types: Mapping[str, TypeDefinition],
        accounts: Mapping[str, AccountDefinition],
    ) -> None:
        """Initialize a schema index.

        Args:
            types: Declared type name to definition.
            accounts: Declared account name to definition.
        """
        self._types = MappingProxyType(dict(types))
        self._accounts = MappingProxyType(dict(accounts))

    @classmethod
    def parse(cls, idl_text: str) -> SchemaIndex:
        """Parse IDL JSON text and build the index.

        Raises:
            SchemaParseError: If the text is not valid JSON or a required
                section is missing or malformed.
        """
        try:
            document = json.loads(idl_text)
        except json.JSONDecodeError as e:
            raise SchemaParseError(f"IDL is not valid JSON: {e}") from e
        return cls.from_document(document)

    @classmethod
    def from_file(cls, path: Path | str) -> SchemaIndex:
        """Read and parse an IDL file."""
        return cls.parse(Path(path).read_text(encoding="utf-8"))

    @classmethod
    def from_document(cls, document: Any) -> SchemaIndex:
        """Build the index from an already decoded JSON document."""
        if not isinstance(document, dict):
            raise SchemaParseError("IDL document must be a JSON object")

        raw_types = document.get("types")
        if not isinstance(raw_types, list):
            raise SchemaParseError("IDL does not contain 'types' or it is not an array")

        types: dict[str, TypeDefinition] = {}
        for entry in raw_types:
            type_def = _parse_type_definition(entry)
            if type_def.name in types:
                raise SchemaParseError(f"Type '{type_def.name}' is already defined")
            types[type_def.name] = type_def

        if "accounts" not in document:
            raise SchemaParseError("IDL does not contain 'accounts' field")
        raw_accounts = document["accounts"]
        if not isinstance(raw_accounts, list):
            raise SchemaParseError("'accounts' field is not an array")

        accounts: dict[str, AccountDefinition] = {}
        for entry in raw_accounts:
            account = cls._parse_account(entry, types)
            if account.name in accounts:
                raise SchemaParseError(f"Account '{account.name}' is already defined")
            accounts[account.name] = account

        return cls(types, accounts)

    @staticmethod
    def _parse_account(
        entry: Any, types: Mapping[str, TypeDefinition]
    ) -> AccountDefinition:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise SchemaParseError(f"Account entry has no name: {entry!r}")
        name = entry["name"]

        body = entry.get("type")
        if body is None:
            # Newer IDLs declare the layout in 'types' under the account's name
            declared = types.get(name)
            if not isinstance(declared, StructDefinition):
                raise SchemaParseError(f"Account '{name}' has no struct layout")
            return AccountDefinition(name, declared.fields)

        if not isinstance(body, dict) or "fields" not in body:
            raise SchemaParseError(f"Account '{name}' type does not contain 'fields'")
        return AccountDefinition(name, _parse_fields(body["fields"], name))

    def get_type(self, name: str) -> TypeDefinition:
        """Get a declared type by name.

        Raises:
            TypeNotFoundError: If no type with that name is declared.
        """
        type_def = self._types.get(name)
        if type_def is None:
            raise TypeNotFoundError(name)
        return type_def

    def get_account(self, name: str) -> AccountDefinition:
        """Get a declared account by name.

        Raises:
            AccountNotFoundError: If no account with that name is declared.
        """
        account = self._accounts.get(name)
        if account is None:
            raise AccountNotFoundError(name)
        return account

