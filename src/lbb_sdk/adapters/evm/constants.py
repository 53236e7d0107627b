"""
EVM-side constants: gas sizing, permit domain and typed-data definitions.
"""

from typing import Dict, List

#: Safety margin added to deployment gas estimates, in percent.
DEPLOY_GAS_BUFFER_PERCENT: int = 20

#: Fixed EIP-712 domain version of the certificate contract.
PERMIT_DOMAIN_VERSION: str = "1"

#: Value carried by every transaction in scope.
ZERO_VALUE: int = 0

#: Offset between the raw recovery id (0/1) and the ``v`` verifying contracts expect.
RECOVERY_ID_OFFSET: int = 27

#: Block tag used for the account nonce; queued transactions count.
PENDING_BLOCK: str = "pending"

EIP712_DOMAIN_TYPE: List[Dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

PERMIT_TYPE: List[Dict[str, str]] = [
    {"name": "owner", "type": "address"},
    {"name": "spender", "type": "address"},
    {"name": "tokenId", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
]

PERMIT_FOR_ALL_TYPE: List[Dict[str, str]] = [
    {"name": "owner", "type": "address"},
    {"name": "operator", "type": "address"},
    {"name": "approved", "type": "bool"},
    {"name": "nonce", "type": "uint256"},
    {"name": "deadline", "type": "uint256"},
]


def deploy_gas_limit(estimate: int) -> int:
    """Raw deployment estimate plus the safety margin (integer arithmetic)."""
    return estimate * (100 + DEPLOY_GAS_BUFFER_PERCENT) // 100
