"""Display, export and value analysis of search results."""

from __future__ import annotations

import base64
import json
from collections import Counter
from pathlib import Path
from typing import Sequence, TextIO

from idl_probe.codec import decode_value
from idl_probe.errors import BufferTooShortError, UnsupportedTypeError
from idl_probe.layout import FieldPathResolver
from idl_probe.schema import SchemaIndex
from idl_probe.search import AccountRecord


def format_records(records: Sequence[AccountRecord], limit: int) -> list[str]:
    """Return a numbered summary of the first ``limit`` records."""
    lines = [f"Found {len(records)} accounts:"]
    for i, record in enumerate(records[:limit], start=1):
        lines.append(f"{i}. Pubkey: {record.pubkey}")
        lines.append(f"   Data Length: {len(record.data)} bytes")
        lines.append(f"   Lamports: {record.lamports}")
    return lines


def records_to_json(records: Sequence[AccountRecord]) -> dict:
    """Build the JSON export document for a result set."""
    return {
        "count": len(records),
        "accounts": [
            {
                "pubkey": r.pubkey,
                "data": base64.b64encode(r.data).decode("ascii"),
                "data_length": len(r.data),
                "lamports": r.lamports,
                "owner": r.owner,
                "executable": r.executable,
                "rent_epoch": r.rent_epoch,
                "extracted_variables": {},
            }
            for r in records
        ],
    }


def save_records(records: Sequence[AccountRecord], path: Path | str) -> None:
    """Write the result set to ``path`` as pretty-printed JSON."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records_to_json(records), f, indent=2)


def print_results(
    records: Sequence[AccountRecord],
    output: Path | str | None,
    limit: int,
    out: TextIO,
) -> None:
    """Print a result summary, saving the full set when it exceeds ``limit``."""
    if not records:
        print("No accounts found matching the criteria.", file=out)
        return

    for line in format_records(records, limit):
        print(line, file=out)

    if len(records) <= limit:
        return

    print(f"\nShowing {limit} of {len(records)} accounts found.", file=out)
    if output is not None:
        save_records(records, output)
        print(f"Full results written to {output}", file=out)
    else:
        print("To see all accounts, use --output to save results to a file.", file=out)


def value_frequencies(
    records: Sequence[AccountRecord],
    schema: SchemaIndex,
    account_name: str,
    path: str,
) -> list[tuple[str, int]]:
    """Count the decoded values of ``path`` across records, most common first.

    Records whose value does not decode are skipped: records too short to
    hold the field, and every record when the field's type has no codec.
    """
    location = FieldPathResolver(schema).resolve(account_name, path)
    counts: Counter[str] = Counter()
    for record in records:
        try:
            counts[decode_value(record.data, location.offset, location.type_ref)] += 1
        except (BufferTooShortError, UnsupportedTypeError):
            continue
    return counts.most_common()
