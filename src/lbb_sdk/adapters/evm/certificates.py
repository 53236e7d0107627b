"""
Certificate NFT contract helpers.

Thin wrappers that pack the ERC-721 certificate calls and push them through
an :class:`~lbb_sdk.adapters.evm.builder.EVMTransactionBuilder`. The
contract bytecode is supplied by the caller.
"""

from typing import Optional

from eth_utils import is_address, to_checksum_address

from ...engine.exceptions import ChainCommunicationError, ValidationError
from .builder import EVMTransactionBuilder
from .CERTIFICATE_ABI import (
    get_burn_abi,
    get_constructor_abi,
    get_mint_abi,
    get_owner_of_abi,
    get_transfer_abi,
)
from .encoding import encode_function_call
from .schemas import SignedEVMTransaction

#: Placeholder URIs the contract is deployed with when none are given.
DEFAULT_BASE_URI = "URL"
DEFAULT_CONTRACT_URI = "URL"


def _contract(address: str) -> str:
    if not isinstance(address, str) or not is_address(address):
        raise ValidationError(f"invalid contract address: {address!r}", field="contract")
    return to_checksum_address(address)


class CertificateClient:
    """
    Deploy and operate a certificate contract as the builder's identity.

    Example::

        certificates = CertificateClient(EVMTransactionBuilder(alice))
        deployed = await certificates.deploy_certificate_contract(bytecode, "Diploma", "DIP")
        receipt = await certificates.builder.wait_for_transaction(deployed.tx_hash)
        await certificates.mint(receipt.contract_address, 1)
    """

    def __init__(self, builder: EVMTransactionBuilder):
        self.builder = builder

    async def deploy_certificate_contract(
        self,
        bytecode: str,
        name: str,
        symbol: str,
        base_uri: str = DEFAULT_BASE_URI,
        contract_uri: str = DEFAULT_CONTRACT_URI,
        *,
        sign_only: bool = False,
    ) -> SignedEVMTransaction:
        """Deploy with ``(name, symbol, base_uri, contract_uri, owner=signer)``."""
        return await self.builder.deploy(
            bytecode,
            get_constructor_abi(),
            [name, symbol, base_uri, contract_uri, self.builder.sender],
            sign_only=sign_only,
        )

    async def mint(
        self,
        contract: str,
        token_id: int,
        to: Optional[str] = None,
        *,
        sign_only: bool = False,
    ) -> SignedEVMTransaction:
        """``safeMint(to, tokenId)``; ``to`` defaults to the signer."""
        data = encode_function_call(get_mint_abi(), "safeMint", [to or self.builder.sender, token_id])
        return await self.builder.send(_contract(contract), data, sign_only=sign_only)

    async def transfer(
        self,
        contract: str,
        to: str,
        token_id: int,
        *,
        sign_only: bool = False,
    ) -> SignedEVMTransaction:
        """``safeTransferFrom(signer, to, tokenId)``."""
        data = encode_function_call(
            get_transfer_abi(), "safeTransferFrom", [self.builder.sender, to, token_id]
        )
        return await self.builder.send(_contract(contract), data, sign_only=sign_only)

    async def burn(self, contract: str, token_id: int, *, sign_only: bool = False) -> SignedEVMTransaction:
        """``burn(tokenId)``."""
        data = encode_function_call(get_burn_abi(), "burn", [token_id])
        return await self.builder.send(_contract(contract), data, sign_only=sign_only)

    async def owner_of(self, contract: str, token_id: int) -> str:
        """
        Current owner of ``token_id``.

        Raises:
            ChainCommunicationError: If the call fails (including a nonexistent token).
        """
        instance = self.builder.web3.eth.contract(address=_contract(contract), abi=get_owner_of_abi())
        try:
            return await instance.functions.ownerOf(token_id).call()
        except Exception as e:
            raise ChainCommunicationError(
                f"cannot read owner of token {token_id}: {e}",
                contract=contract,
                endpoint="ownerOf",
            ) from e
