"""
Polymorphic Types (Discriminated Unions)

Type unions that select the concrete model from a discriminator field, so a
permit or a transaction result can travel as JSON and come back as the right
class.

Example usage:
    # Pydantic selects SignedPermitForAll when permit_type="PermitForAll"
    permit = parse_permit(json.loads(payload))
"""

from typing import Any, Mapping, Union

from pydantic import Field, TypeAdapter
from typing_extensions import Annotated

from .cosmos.schemas import CosmosTransactionConfirmation
from .evm.schemas import (
    EVMTransactionConfirmation,
    SignedPermit,
    SignedPermitForAll,
)


# Selected by 'permit_type': "Permit" or "PermitForAll"
PermitTypes = Annotated[
    Union[
        SignedPermit,
        SignedPermitForAll,
    ],
    Field(discriminator="permit_type"),
]


# Selected by 'confirmation_type': "cosmos" or "evm"
TransactionConfirmationTypes = Annotated[
    Union[
        CosmosTransactionConfirmation,
        EVMTransactionConfirmation,
    ],
    Field(discriminator="confirmation_type"),
]

_permit_adapter = TypeAdapter(PermitTypes)
_confirmation_adapter = TypeAdapter(TransactionConfirmationTypes)


def parse_permit(data: Union[str, bytes, Mapping[str, Any]]) -> Union[SignedPermit, SignedPermitForAll]:
    """Restore a signed permit from its JSON text or dict form."""
    if isinstance(data, (str, bytes)):
        return _permit_adapter.validate_json(data)
    return _permit_adapter.validate_python(data)


def parse_confirmation(
    data: Union[str, bytes, Mapping[str, Any]],
) -> Union[CosmosTransactionConfirmation, EVMTransactionConfirmation]:
    """Restore a transaction result from its JSON text or dict form."""
    if isinstance(data, (str, bytes)):
        return _confirmation_adapter.validate_json(data)
    return _confirmation_adapter.validate_python(data)
