"""JSON-RPC transport for fetching program accounts with memcmp filters."""

from __future__ import annotations

import base64
from itertools import count
from typing import Any, Sequence

import httpx
from loguru import logger

from idl_probe.search import AccountRecord, MemcmpFilter


class RpcError(Exception):
    """Exception raised when the RPC node answers with a JSON-RPC error."""

    def __init__(self, code: int | None, message: str) -> None:
        self.code = code
        super().__init__(f"RPC error {code}: {message}")


def memcmp_param(memcmp: MemcmpFilter) -> dict[str, Any]:
    """Render a filter the way ``getProgramAccounts`` expects it."""
    return {
        "memcmp": {
            "offset": memcmp.offset,
            "bytes": base64.b64encode(memcmp.value).decode("ascii"),
            "encoding": "base64",
        }
    }


def _record_from_result(item: dict[str, Any]) -> AccountRecord:
    account = item["account"]
    data, encoding = account["data"]
    if encoding != "base64":
        raise RpcError(None, f"Unexpected account data encoding: {encoding}")
    return AccountRecord(
        pubkey=item["pubkey"],
        data=base64.b64decode(data),
        lamports=account.get("lamports", 0),
        owner=account.get("owner", ""),
        executable=account.get("executable", False),
        rent_epoch=account.get("rentEpoch", 0),
    )


class RpcFetcher:
    """Fetches program accounts from an RPC node.

    Instances are callable with ``(program_id, filters)`` and can be handed
    directly to ConstraintSearchEngine. Each call is one HTTP request; there
    is no retry or pagination.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self._client = client or httpx.Client(timeout=timeout)
        self._ids = count(1)

    def __call__(self, program_id: str, filters: Sequence[MemcmpFilter]) -> list[AccountRecord]:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": "getProgramAccounts",
            "params": [
                program_id,
                {
                    "encoding": "base64",
                    "filters": [memcmp_param(f) for f in filters],
                },
            ],
        }
        logger.debug(f"getProgramAccounts {program_id} with {len(filters)} filters")

        response = self._client.post(self.url, json=payload)
        response.raise_for_status()
        body = response.json()

        if "error" in body:
            error = body["error"]
            raise RpcError(error.get("code"), error.get("message", ""))

        records = [_record_from_result(item) for item in body.get("result") or []]
        logger.debug(f"getProgramAccounts returned {len(records)} accounts")
        return records

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> RpcFetcher:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
