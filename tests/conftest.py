"""
Pytest fixtures for the block dump tests.

The node is replaced by an in-memory fake Web3, so no test needs a running
Ethereum client.
"""

import pytest
from hexbytes import HexBytes
from web3.datastructures import AttributeDict

FAKE_ENDPOINT = "https://mainnet.example.org/v3/secret-key"


def make_block(number: int) -> AttributeDict:
    return AttributeDict({
        "number": number,
        "hash": HexBytes(number.to_bytes(32, "big")),
        "parentHash": HexBytes((number - 1 if number else 0).to_bytes(32, "big")),
        "timestamp": 1_600_000_000 + number * 12,
        "extraData": HexBytes(b"geth"),
        "transactions": [HexBytes(b"\xaa" * 32), HexBytes(b"\xbb" * 32)],
    })


class FakeProvider:
    """Provider with an explicit close, like a WebSocket transport."""

    def __init__(self, fail_on_close=False):
        self.fail_on_close = fail_on_close
        self.disconnect_calls = 0

    def disconnect(self):
        self.disconnect_calls += 1
        if self.fail_on_close:
            raise RuntimeError("socket already closed")


class PlainProvider:
    """Provider without any close operation, like HTTP."""


class FakeEth:
    def __init__(self, fail_at=None, empty_at=None):
        self.fail_at = fail_at
        self.empty_at = empty_at
        self.calls = []

    def get_block(self, block_number, full_transactions=False):
        self.calls.append((block_number, full_transactions))
        if block_number == self.fail_at:
            raise ValueError(f"header not found: {block_number}")
        if block_number == self.empty_at:
            return None
        return make_block(block_number)


class FakeWeb3:
    def __init__(self, provider=None, **eth_kwargs):
        self.provider = provider if provider is not None else FakeProvider()
        self.eth = FakeEth(**eth_kwargs)


@pytest.fixture
def fake_node(monkeypatch):
    """
    Install a factory for fake nodes in place of the real connection.

    Returns a callable: fake_node(**kwargs) -> FakeWeb3 that the next
    dump will connect to. Connection attempts are recorded on `.connects`.
    """
    state = {"w3": FakeWeb3(), "connects": []}

    def fake_connect(endpoint, timeout=10, poa=False):
        state["connects"].append((endpoint, timeout, poa))
        return state["w3"]

    monkeypatch.setattr("eth_headers.dumper.connect_web3", fake_connect)

    def install(**kwargs):
        state["w3"] = FakeWeb3(**kwargs)
        return state["w3"]

    install.connects = state["connects"]
    install.current = lambda: state["w3"]
    return install
