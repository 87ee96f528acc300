"""Tests for the command line entry point."""

import base64
import json

import httpx
import pytest
from loguru import logger

from conftest import build_custody, build_pool
from idl_probe.cli import main
from idl_probe.rpc import RpcFetcher


class LedgerTransport:
    """Mock RPC node: evaluates memcmp filters over a fixed account set."""

    def __init__(self, accounts):
        self.accounts = accounts
        self.requests = []

    def __call__(self, request):
        body = json.loads(request.content)
        self.requests.append(body)
        filters = body["params"][1]["filters"]
        result = []
        for pubkey, data in self.accounts:
            if all(self._matches(data, f["memcmp"]) for f in filters):
                result.append(
                    {
                        "pubkey": pubkey,
                        "account": {
                            "data": [base64.b64encode(data).decode("ascii"), "base64"],
                            "executable": False,
                            "lamports": 1,
                            "owner": "Prog",
                            "rentEpoch": 0,
                        },
                    }
                )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    @staticmethod
    def _matches(data, memcmp):
        value = base64.b64decode(memcmp["bytes"])
        offset = memcmp["offset"]
        return data[offset : offset + len(value)] == value


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger.remove()


@pytest.fixture
def transport():
    accounts = [(f"custody{i}", build_custody(decimals=6 + i % 2, fee_scalar=i)) for i in range(7)]
    accounts.append(("pool0", build_pool()))
    return LedgerTransport(accounts)


@pytest.fixture
def fetcher(transport):
    return RpcFetcher("https://rpc.example.com", client=httpx.Client(transport=httpx.MockTransport(transport)))


def _args(idl_file, *extra):
    return ["--rpc", "https://rpc.example.com", "--idl", str(idl_file), "-p", "Prog", "-n", "Custody", *extra]


class TestMain:
    """Tests for main()."""

    def test_list_all(self, idl_file, fetcher, transport, capsys):
        assert main(_args(idl_file, "--limit", "10"), fetcher=fetcher) == 0
        out = capsys.readouterr().out
        assert "Found 7 accounts:" in out
        assert "pool0" not in out
        assert len(transport.requests) == 1

    def test_path_value_pairs(self, idl_file, fetcher, transport, capsys):
        code = main(
            _args(idl_file, "--path", "decimals", "-k", "7", "--path", "pricing.feeScalar", "-k", "3"),
            fetcher=fetcher,
        )
        assert code == 0
        out = capsys.readouterr().out
        assert "Found 1 accounts:" in out
        assert "custody3" in out
        assert len(transport.requests) == 1
        assert len(transport.requests[0]["params"][1]["filters"]) == 2

    def test_where_expression(self, idl_file, fetcher, capsys):
        assert main(_args(idl_file, "-w", "decimals=6", "--limit", "10"), fetcher=fetcher) == 0
        assert "Found 4 accounts:" in capsys.readouterr().out

    def test_output_file_when_truncated(self, idl_file, fetcher, tmp_path, capsys):
        output = tmp_path / "all.json"
        assert main(_args(idl_file, "--limit", "2", "-o", str(output)), fetcher=fetcher) == 0
        assert "Showing 2 of 7 accounts found." in capsys.readouterr().out
        assert json.loads(output.read_text())["count"] == 7

    def test_interest(self, idl_file, fetcher, capsys):
        assert main(_args(idl_file, "-s", "decimals"), fetcher=fetcher) == 0
        out = capsys.readouterr().out
        assert "Top 5 most common values for 'decimals':" in out
        assert "Value: 6, Count: 4" in out
        assert "Value: 7, Count: 3" in out

    def test_interest_without_codec(self, idl_file, fetcher, capsys):
        assert main(_args(idl_file, "-s", "rateLimit"), fetcher=fetcher) == 0
        captured = capsys.readouterr()
        assert "Found 7 accounts:" in captured.out
        assert "Top 5 most common values for 'rateLimit':" in captured.out
        assert "Value:" not in captured.out
        assert "Error:" not in captured.err

    def test_mismatched_paths_and_values(self, idl_file, fetcher, transport, capsys):
        assert main(_args(idl_file, "--path", "decimals"), fetcher=fetcher) == 1
        assert "number of paths and values must match" in capsys.readouterr().err
        assert transport.requests == []

    def test_unknown_field(self, idl_file, fetcher, capsys):
        assert main(_args(idl_file, "-w", "nope=1"), fetcher=fetcher) == 1
        assert "Field not found: nope" in capsys.readouterr().err

    def test_missing_idl_file(self, tmp_path, fetcher, capsys):
        assert main(_args(tmp_path / "missing.json"), fetcher=fetcher) == 1
        assert "Error:" in capsys.readouterr().err

    def test_rpc_required(self, idl_file, monkeypatch, capsys):
        monkeypatch.delenv("IDL_PROBE_RPC_URL", raising=False)
        args = ["--idl", str(idl_file), "-p", "Prog", "-n", "Custody"]
        assert main(args) == 1
        assert "--rpc is required" in capsys.readouterr().err
