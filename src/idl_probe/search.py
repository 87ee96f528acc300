"""Multi-constraint account search: one remote filtered fetch, then local narrowing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from loguru import logger

from idl_probe.codec import decode_value, encode_value
from idl_probe.discriminator import account_discriminator
from idl_probe.layout import FieldPathResolver
from idl_probe.parsing import parse_constraint
from idl_probe.schema import SchemaIndex


@dataclass(frozen=True)
class MemcmpFilter:
    """Exact byte equality at an offset, evaluated by the remote side."""

    offset: int
    value: bytes

    def matches(self, data: bytes) -> bool:
        """Return whether ``data`` holds ``value`` at ``offset``."""
        end = self.offset + len(self.value)
        return len(data) >= end and data[self.offset : end] == self.value


@dataclass
class AccountRecord:
    """An account returned by the remote side."""

    pubkey: str
    data: bytes
    lamports: int = 0
    owner: str = ""
    executable: bool = False
    rent_epoch: int = 0


class AccountFetcher(Protocol):
    """Remote fetch capability: all accounts of a program matching every filter."""

    def __call__(self, program_id: str, filters: Sequence[MemcmpFilter]) -> list[AccountRecord]: ...


@dataclass(frozen=True)
class Constraint:
    """A field path and the text value it must equal."""

    path: str
    value: str

    @classmethod
    def parse(cls, expression: str) -> Constraint:
        """Build a constraint from a ``path=value`` expression."""
        spec = parse_constraint(expression)
        return cls(spec.path, spec.value)


@dataclass(frozen=True)
class PathValueConstraint:
    """A constraint resolved against the schema: offset and encoded bytes."""

    path: str
    value: bytes
    offset: int

    def as_filter(self) -> MemcmpFilter:
        return MemcmpFilter(self.offset, self.value)


def filter_by_constraint(
    records: Sequence[AccountRecord], constraint: PathValueConstraint
) -> list[AccountRecord]:
    """Keep the records whose bytes at the constraint's offset equal its value.

    Records too short to contain the compared slice are dropped.
    """
    memcmp = constraint.as_filter()
    return [r for r in records if memcmp.matches(r.data)]


class ConstraintSearchEngine:
    """Finds accounts of a given type whose fields equal the requested values.

    Only the first constraint is sent to the remote side, together with the
    account discriminator; every further constraint narrows the fetched set
    in memory. Each search makes exactly one fetch call.
    """

    def __init__(self, schema: SchemaIndex, fetch: AccountFetcher, program_id: str) -> None:
        """Initialize the engine.

        Args:
            schema: Index of the program's IDL.
            fetch: Remote filtered fetch capability.
            program_id: Program that owns the accounts.
        """
        self.schema = schema
        self.fetch = fetch
        self.program_id = program_id
        self.resolver = FieldPathResolver(schema)

    def resolve_constraints(
        self, account_name: str, constraints: Sequence[Constraint]
    ) -> list[PathValueConstraint]:
        """Resolve each constraint's offset and encode its value.

        Raises:
            IdlProbeError: If any path does not resolve or any value does not encode.
        """
        resolved = []
        for constraint in constraints:
            location = self.resolver.resolve(account_name, constraint.path)
            encoded = encode_value(constraint.value, location.type_ref)
            resolved.append(PathValueConstraint(constraint.path, encoded, location.offset))
        return resolved

    def search(
        self, account_name: str, constraints: Sequence[Constraint | tuple[str, str]] = ()
    ) -> list[AccountRecord]:
        """Return accounts of ``account_name`` satisfying every constraint.

        Constraints are applied in the given order. All of them are resolved
        before any fetch, so a bad path or value fails without network access.
        """
        constraints = [c if isinstance(c, Constraint) else Constraint(*c) for c in constraints]
        self.schema.get_account(account_name)
        discriminator_filter = MemcmpFilter(0, account_discriminator(account_name))

        if not constraints:
            logger.info(f"Searching for all {account_name} accounts...")
            return self.fetch(self.program_id, [discriminator_filter])

        resolved = self.resolve_constraints(account_name, constraints)
        first, rest = resolved[0], resolved[1:]

        logger.info(
            f"Searching for {account_name} accounts with {len(resolved)} constraints..."
        )
        logger.debug(f"Remote filter: {first.path} at offset {first.offset} ({len(first.value)} bytes)")
        records = self.fetch(self.program_id, [discriminator_filter, first.as_filter()])

        for constraint in rest:
            if not records:
                break
            logger.info(f"Applying additional constraint: path={constraint.path}")
            records = filter_by_constraint(records, constraint)

        return records


def extract_field_value(
    data: bytes, schema: SchemaIndex, account_name: str, path: str
) -> str:
    """Decode the value of ``path`` from one account's data."""
    location = FieldPathResolver(schema).resolve(account_name, path)
    return decode_value(data, location.offset, location.type_ref)
