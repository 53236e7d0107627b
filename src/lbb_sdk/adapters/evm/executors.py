"""
Permit execution by a gas-paying broadcaster.

A :class:`PermitExecutor` wraps the broadcaster's
:class:`~lbb_sdk.adapters.evm.builder.EVMTransactionBuilder`. Every contract
argument is taken from the signed permit object; the broadcaster contributes
only its nonce, gas price and signing key.
"""

import logging
from typing import Any, List, Optional

from ...engine.exceptions import PermitScopeError, ValidationError
from .builder import EVMTransactionBuilder
from .CERTIFICATE_ABI import (
    get_burn_with_permit_abi,
    get_permit_for_all_abi,
    get_transfer_with_permit_abi,
)
from .encoding import encode_function_call
from .schemas import SignedEVMTransaction, SignedPermit, SignedPermitForAll


class PermitExecutor:
    """
    Execute signed permits from another identity.

    Args:
        broadcaster_builder: Builder of the identity that submits and pays gas.
        logger: Optional logger overriding the module logger.

    Example::

        executor = PermitExecutor(EVMTransactionBuilder(relayer))
        signed = await executor.transfer_with_permit(permit)
        await executor.builder.wait_for_transaction(signed.tx_hash)
    """

    def __init__(self, broadcaster_builder: EVMTransactionBuilder, logger: Optional[logging.Logger] = None):
        self.builder = broadcaster_builder
        self.logger = logger or logging.getLogger(__name__)

    @property
    def broadcaster(self) -> str:
        return self.builder.sender

    def _check_permit(self, permit: Any, expected_type: type) -> None:
        if not isinstance(permit, expected_type):
            raise PermitScopeError(
                f"expected {expected_type.__name__}, got {type(permit).__name__}",
                field="permit",
            )
        try:
            permit.validate_structure()
        except ValueError as e:
            raise ValidationError(f"malformed permit: {e}", field="permit") from e
        if permit.chain_id != self.builder.chain_id:
            raise PermitScopeError(
                "permit was signed for another chain",
                field="chain_id",
                chain_id=permit.chain_id,
                expected=self.builder.chain_id,
            )

    @staticmethod
    def _signature_args(permit: Any) -> List[Any]:
        signature = permit.signature
        return [permit.deadline, signature.v, signature.r_bytes, signature.s_bytes]

    async def _execute(
        self,
        permit: Any,
        abi: List[dict],
        function: str,
        args: List[Any],
        sign_only: bool,
        serialize: bool,
    ) -> SignedEVMTransaction:
        data = encode_function_call(abi, function, args)
        signed = await self.builder.send(
            permit.contract_address, data, sign_only=sign_only, serialize=serialize
        )
        self.logger.info(
            "%s %s for owner %s via %s (%s)",
            "Signed" if sign_only else "Executed",
            function, permit.owner, self.broadcaster, signed.tx_hash,
        )
        return signed

    async def execute_permit_for_all(
        self,
        permit: SignedPermitForAll,
        *,
        sign_only: bool = False,
        serialize: bool = False,
    ) -> SignedEVMTransaction:
        """
        Submit ``permitForAll(owner, operator, approved, deadline, v, r, s)``.

        Raises:
            PermitScopeError: If the permit is of another kind or chain.
            ValidationError: If the permit is malformed.
        """
        self._check_permit(permit, SignedPermitForAll)
        args = [permit.owner, permit.operator, permit.approved] + self._signature_args(permit)
        return await self._execute(
            permit, get_permit_for_all_abi(), "permitForAll", args, sign_only, serialize
        )

    async def transfer_with_permit(
        self,
        permit: SignedPermit,
        to: Optional[str] = None,
        *,
        sign_only: bool = False,
        serialize: bool = False,
    ) -> SignedEVMTransaction:
        """
        Submit ``transferWithPermit(from, to, tokenId, deadline, v, r, s)``.

        Args:
            permit: Signed single-token permit.
            to: Recipient; defaults to the signed spender. Another recipient is
                accepted only when the broadcaster is the signed spender.

        Raises:
            PermitScopeError: If ``to`` falls outside what the owner signed.
        """
        self._check_permit(permit, SignedPermit)
        recipient = to or permit.spender
        if recipient.lower() != permit.spender.lower() and self.broadcaster.lower() != permit.spender.lower():
            raise PermitScopeError(
                "recipient differs from the signed spender and the broadcaster is not the spender",
                field="to",
                spender=permit.spender,
                broadcaster=self.broadcaster,
            )
        args = [permit.owner, recipient, permit.token_id] + self._signature_args(permit)
        return await self._execute(
            permit, get_transfer_with_permit_abi(), "transferWithPermit", args, sign_only, serialize
        )

    async def burn_with_permit(
        self,
        permit: SignedPermit,
        *,
        sign_only: bool = False,
        serialize: bool = False,
    ) -> SignedEVMTransaction:
        """Submit ``burnWithPermit(owner, tokenId, deadline, v, r, s)``."""
        self._check_permit(permit, SignedPermit)
        args = [permit.owner, permit.token_id] + self._signature_args(permit)
        return await self._execute(
            permit, get_burn_with_permit_abi(), "burnWithPermit", args, sign_only, serialize
        )
