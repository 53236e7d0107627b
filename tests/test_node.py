"""
REST node client tests over ``httpx.MockTransport``.
"""

import base64
import json

import httpx
import pytest

from lbb_sdk.adapters.cosmos.node import CosmosRestClient
from lbb_sdk.engine.exceptions import ChainCommunicationError, SimulationError

API_URL = "http://node.test"


def _client(handler):
    http = httpx.AsyncClient(base_url=API_URL, transport=httpx.MockTransport(handler))
    return CosmosRestClient(API_URL, http_client=http)


class TestQueries:

    @pytest.mark.asyncio
    async def test_get_account_unwraps_nested_account(self):
        def handler(request):
            assert request.url.path == "/cosmos/auth/v1beta1/accounts/6x1alice"
            return httpx.Response(200, json={"account": {
                "@type": "/ethermint.types.v1.EthAccount",
                "base_account": {"address": "6x1alice", "account_number": "42", "sequence": "7"},
            }})

        async with _client(handler) as node:
            account = await node.get_account("6x1alice")
        assert (account.account_number, account.sequence) == (42, 7)

    @pytest.mark.asyncio
    async def test_balances(self):
        def handler(request):
            if request.url.path.endswith("/by_denom"):
                assert request.url.params["denom"] == "usix"
                return httpx.Response(200, json={"balance": {"denom": "usix", "amount": "12"}})
            return httpx.Response(200, json={"balances": [{"denom": "asix", "amount": "3"}]})

        node = _client(handler)
        assert str(await node.get_balance("6x1alice", "usix")) == "12usix"
        assert [str(c) for c in await node.get_all_balances("6x1alice")] == ["3asix"]

    @pytest.mark.asyncio
    async def test_get_tx_not_found(self):
        node = _client(lambda request: httpx.Response(404, json={"message": "tx not found"}))
        assert await node.get_tx("ABC") is None

    @pytest.mark.asyncio
    async def test_get_tx_found(self):
        node = _client(lambda request: httpx.Response(200, json={"tx_response": {"txhash": "ABC", "code": 0}}))
        assert (await node.get_tx("ABC"))["txhash"] == "ABC"

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        node = _client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(ChainCommunicationError) as exc_info:
            await node.get_all_balances("6x1alice")
        assert exc_info.value.context["endpoint"] == "/cosmos/bank/v1beta1/balances/6x1alice"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ChainCommunicationError):
            await _client(handler).get_account("6x1alice")

    @pytest.mark.asyncio
    async def test_raw_query(self):
        node = _client(lambda request: httpx.Response(200, json={"path": request.url.path}))
        assert await node.query("sixprotocol/nftmngr/nft_schema") == {"path": "/sixprotocol/nftmngr/nft_schema"}


class TestTransactions:

    @pytest.mark.asyncio
    async def test_broadcast_posts_base64(self):
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"tx_response": {"txhash": "ABC", "code": 0, "height": "0"}})

        response = await _client(handler).broadcast(b'{"msg":[]}')
        assert base64.b64decode(seen["tx_bytes"]) == b'{"msg":[]}'
        assert seen["mode"] == "BROADCAST_MODE_SYNC"
        assert response.tx_hash == "ABC"
        assert response.is_accepted()

    @pytest.mark.asyncio
    async def test_broadcast_non_zero_code(self):
        node = _client(lambda request: httpx.Response(200, json={"tx_response": {
            "txhash": "ABC", "code": 13, "raw_log": "insufficient fee",
        }}))
        response = await node.broadcast(b"{}")
        assert not response.is_accepted()
        assert response.raw_log == "insufficient fee"

    @pytest.mark.asyncio
    async def test_simulate(self):
        node = _client(lambda request: httpx.Response(200, json={"gas_info": {"gas_used": "81234", "gas_wanted": "0"}}))
        assert (await node.simulate(b"{}")).gas_used == 81234

    @pytest.mark.asyncio
    async def test_simulate_rejected(self):
        node = _client(lambda request: httpx.Response(400, text="out of gas"))
        with pytest.raises(SimulationError) as exc_info:
            await node.simulate(b"{}")
        assert exc_info.value.context["raw_log"] == "out of gas"
