"""Shared IDL fixtures and record builders for the test suite."""

import json
import struct

import base58
import pytest

from idl_probe.discriminator import account_discriminator
from idl_probe.schema import SchemaIndex
from idl_probe.search import AccountRecord

# Custody layout (absolute offsets, discriminator included):
#   meta 8..97, pool 97, mint 129, decimals 161, isStable 162,
#   pricing 163 (tradeImpactFeeScalar 163, feeScalar 171, maxLeverage 179, swapSpread 187),
#   oracle 195 (41 bytes), assets 236 (owned 236, locked 244, ratio 252),
#   fees 260, rateLimit 268, cumulative 272, bumps 288, admin 290, label 322
CUSTODY_IDL = {
    "version": "0.1.0",
    "name": "perpetuals",
    "accounts": [
        {
            "name": "Custody",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "meta", "type": {"defined": "Meta"}},
                    {"name": "pool", "type": "publicKey"},
                    {"name": "mint", "type": "publicKey"},
                    {"name": "decimals", "type": "u8"},
                    {"name": "isStable", "type": "bool"},
                    {"name": "pricing", "type": {"defined": "Pricing"}},
                    {"name": "oracle", "type": {"defined": "Oracle"}},
                    {"name": "assets", "type": {"defined": "Assets"}},
                    {"name": "fees", "type": {"array": ["u16", 4]}},
                    {"name": "rateLimit", "type": "u32"},
                    {"name": "cumulative", "type": "u128"},
                    {"name": "bumps", "type": {"tuple": ["u8", "u8"]}},
                    {"name": "admin", "type": {"option": "publicKey"}},
                    {"name": "label", "type": "string"},
                    {"name": "afterLabel", "type": "u8"},
                ],
            },
        },
        {
            "name": "Pool",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "name", "type": "u64"},
                    {"name": "custodies", "type": {"array": ["publicKey", 2]}},
                ],
            },
        },
    ],
    "types": [
        {
            "name": "Meta",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "authority", "type": "publicKey"},
                    {"name": "delegate", "type": "publicKey"},
                    {"name": "seed", "type": {"array": ["u8", 16]}},
                    {"name": "flags", "type": "u64"},
                    {"name": "bump", "type": "u8"},
                ],
            },
        },
        {
            "name": "Pricing",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "tradeImpactFeeScalar", "type": "u64"},
                    {"name": "feeScalar", "type": "u64"},
                    {"name": "maxLeverage", "type": "u64"},
                    {"name": "swapSpread", "type": "i64"},
                ],
            },
        },
        {
            "name": "Oracle",
            "type": {
                "kind": "enum",
                "variants": [
                    {"name": "None"},
                    {"name": "Pyth", "fields": [{"name": "account", "type": "publicKey"}]},
                    {
                        "name": "Switchboard",
                        "fields": [
                            {"name": "account", "type": "publicKey"},
                            {"name": "slot", "type": "u64"},
                        ],
                    },
                ],
            },
        },
        {
            "name": "Assets",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "owned", "type": "u64"},
                    {"name": "locked", "type": "u64"},
                    {"name": "ratio", "type": "f64"},
                ],
            },
        },
    ],
}

CUSTODY_SIZE = 322


def pubkey(seed: int) -> str:
    """Deterministic base58 public key made of one repeated byte."""
    return base58.b58encode(bytes([seed]) * 32).decode("ascii")


def build_custody(
    pool: int = 1,
    mint: int = 2,
    decimals: int = 6,
    is_stable: bool = False,
    trade_impact_fee_scalar: int = 0,
    fee_scalar: int = 0,
    owned: int = 0,
    ratio: float = 0.0,
) -> bytes:
    """Build the raw bytes of a Custody account, up to (not including) label."""
    data = bytearray(account_discriminator("Custody"))
    data += b"\x00" * 89
    data += bytes([pool]) * 32
    data += bytes([mint]) * 32
    data += struct.pack("<B?", decimals, is_stable)
    data += struct.pack("<QQQq", trade_impact_fee_scalar, fee_scalar, 10, -5)
    data += b"\x00" * 41
    data += struct.pack("<QQd", owned, 0, ratio)
    data += b"\x00" * (CUSTODY_SIZE - len(data))
    return bytes(data)


def build_pool(name: int = 7) -> bytes:
    return account_discriminator("Pool") + struct.pack("<Q", name) + b"\x00" * 64


class FakeLedger:
    """In-memory stand-in for the remote side: applies memcmp filters and counts calls."""

    def __init__(self, records: list[AccountRecord]) -> None:
        self.records = records
        self.calls: list[tuple[str, list]] = []

    def __call__(self, program_id, filters):
        self.calls.append((program_id, list(filters)))
        return [r for r in self.records if all(f.matches(r.data) for f in filters)]


@pytest.fixture
def custody_idl_text():
    return json.dumps(CUSTODY_IDL)


@pytest.fixture
def schema(custody_idl_text):
    return SchemaIndex.parse(custody_idl_text)


@pytest.fixture
def idl_file(tmp_path, custody_idl_text):
    path = tmp_path / "perpetuals.json"
    path.write_text(custody_idl_text)
    return path
