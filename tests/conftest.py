import os
import sys
from pathlib import Path

import pytest

# Make ``import mocks`` work regardless of the invocation directory.
sys.path.insert(0, str(Path(__file__).parent))

from mocks import (  # noqa: E402
    FakeClock,
    FakeNode,
    MockWeb3Provider,
    OUTSIDER_PRIVATE_KEY,
    RELAYER_PRIVATE_KEY,
    TEST_MNEMONIC,
    make_client,
)
from lbb_sdk.accounts.identity import Identity  # noqa: E402


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("LBB_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def web3():
    return MockWeb3Provider()


@pytest.fixture
def node():
    return FakeNode()


@pytest.fixture
def client(web3, node):
    return make_client(web3=web3, node=node)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def alice(client):
    return Identity.create(client, "alice", TEST_MNEMONIC)


@pytest.fixture
def relayer(client):
    return Identity.create_from_private_key(client, "relayer", RELAYER_PRIVATE_KEY)


@pytest.fixture
def outsider(client):
    return Identity.create_from_private_key(client, "outsider", OUTSIDER_PRIVATE_KEY)
