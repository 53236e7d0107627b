"""
Message-chain node access.

``CosmosNodeClient`` is the transport interface the transaction pipeline
depends on; ``CosmosRestClient`` implements it with ``httpx`` against the
node's REST (LCD) endpoints. Transport failures surface as
:class:`ChainCommunicationError` and are never retried here.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from ...engine.exceptions import ChainCommunicationError, SimulationError
from .schemas import AccountInfo, BroadcastResponse, Coin, SimulateResponse

BROADCAST_MODE_SYNC = "BROADCAST_MODE_SYNC"
BROADCAST_MODE_ASYNC = "BROADCAST_MODE_ASYNC"


class CosmosNodeClient(ABC):
    """Operations the SDK needs from a message-chain node."""

    @abstractmethod
    async def get_account(self, address: str) -> AccountInfo:
        """Account number and next sequence of ``address``."""

    @abstractmethod
    async def simulate(self, tx_bytes: bytes) -> SimulateResponse:
        """Dry-run a transaction and report gas usage."""

    @abstractmethod
    async def broadcast(self, tx_bytes: bytes, mode: str = BROADCAST_MODE_SYNC) -> BroadcastResponse:
        """Submit a transaction and return the synchronous answer."""

    @abstractmethod
    async def get_tx(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """The ``tx_response`` for ``tx_hash``, or ``None`` while it is not included."""

    @abstractmethod
    async def get_all_balances(self, address: str) -> List[Coin]:
        pass

    @abstractmethod
    async def get_balance(self, address: str, denom: str) -> Coin:
        pass

    @abstractmethod
    async def query(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Raw GET against a module query route (schemas, custom module state)."""

    async def aclose(self) -> None:
        return None


def _unwrap_account(account: Dict[str, Any]) -> Dict[str, Any]:
    # EthAccount and vesting accounts nest the base account.
    for key in ("base_account", "base_vesting_account"):
        if key in account:
            return _unwrap_account(account[key])
    return account


class CosmosRestClient(CosmosNodeClient):
    """
    REST implementation over ``httpx.AsyncClient``.

    Args:
        api_url: REST endpoint, e.g. ``https://api1.fivenet.sixprotocol.net``.
        timeout: Request timeout in seconds.
        http_client: Pre-built client (tests pass one with a mock transport).
        logger: Optional logger overriding the module logger.

    Example::

        async with CosmosRestClient("https://api1.fivenet.sixprotocol.net") as node:
            balances = await node.get_all_balances("6x1...")
    """

    def __init__(
        self,
        api_url: str,
        timeout: float = 30,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(base_url=self.api_url, timeout=timeout)
        self.logger = logger or logging.getLogger(__name__)

    async def __aenter__(self) -> "CosmosRestClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ChainCommunicationError(
                f"request to message-chain node failed: {e}", endpoint=path
            ) from e

    @staticmethod
    def _json(response: httpx.Response, path: str) -> Dict[str, Any]:
        if response.status_code >= 400:
            raise ChainCommunicationError(
                f"node answered HTTP {response.status_code}",
                endpoint=path,
                body=response.text[:500],
            )
        try:
            return response.json()
        except ValueError as e:
            raise ChainCommunicationError("node returned invalid JSON", endpoint=path) from e

    async def get_account(self, address: str) -> AccountInfo:
        path = f"/cosmos/auth/v1beta1/accounts/{address}"
        data = self._json(await self._request("GET", path), path)
        account = _unwrap_account(data.get("account") or {})
        return AccountInfo(
            address=account.get("address", address),
            account_number=int(account.get("account_number") or 0),
            sequence=int(account.get("sequence") or 0),
        )

    async def simulate(self, tx_bytes: bytes) -> SimulateResponse:
        path = "/cosmos/tx/v1beta1/simulate"
        response = await self._request(
            "POST", path, json={"tx_bytes": base64.b64encode(tx_bytes).decode("ascii")}
        )
        if response.status_code >= 400:
            raise SimulationError(
                f"simulation rejected (HTTP {response.status_code})",
                endpoint=path,
                raw_log=response.text[:500],
            )
        gas_info = self._json(response, path).get("gas_info") or {}
        return SimulateResponse(
            gas_used=int(gas_info.get("gas_used") or 0),
            gas_wanted=int(gas_info.get("gas_wanted") or 0),
        )

    async def broadcast(self, tx_bytes: bytes, mode: str = BROADCAST_MODE_SYNC) -> BroadcastResponse:
        path = "/cosmos/tx/v1beta1/txs"
        response = await self._request(
            "POST",
            path,
            json={"tx_bytes": base64.b64encode(tx_bytes).decode("ascii"), "mode": mode},
        )
        tx_response = self._json(response, path).get("tx_response") or {}
        self.logger.debug("Broadcast answer: %s", tx_response)
        return BroadcastResponse.model_validate(tx_response)

    async def get_tx(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        path = f"/cosmos/tx/v1beta1/txs/{tx_hash}"
        response = await self._request("GET", path)
        if response.status_code == 404 or (
            response.status_code >= 400 and "not found" in response.text.lower()
        ):
            return None
        return self._json(response, path).get("tx_response")

    async def get_all_balances(self, address: str) -> List[Coin]:
        path = f"/cosmos/bank/v1beta1/balances/{address}"
        data = self._json(await self._request("GET", path), path)
        return [Coin.model_validate(coin) for coin in data.get("balances") or []]

    async def get_balance(self, address: str, denom: str) -> Coin:
        path = f"/cosmos/bank/v1beta1/balances/{address}/by_denom"
        data = self._json(await self._request("GET", path, params={"denom": denom}), path)
        balance = data.get("balance") or {"denom": denom, "amount": "0"}
        return Coin.model_validate(balance)

    async def query(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        route = path if path.startswith("/") else f"/{path}"
        return self._json(await self._request("GET", route, params=params), route)
