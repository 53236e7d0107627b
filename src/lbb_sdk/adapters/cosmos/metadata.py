"""
Certificate schema and metadata on the message chain's ``nftmngr`` module.

A schema code has the form ``{ORG}.{code}`` (``myorg.lbbv01``). Deploying a
schema stamps the code and the signer as owner into the caller's schema
definition, then submits it base64-encoded in ``MsgCreateNFTSchema``. Metadata
instances reference a deployed schema by code and a caller-chosen token id.

The schema and metadata documents themselves belong to the caller; only the
fields the chain keys on are filled in here.
"""

import asyncio
import base64
import logging
from typing import Any, Dict, Mapping, Optional

from ...accounts.identity import IdentityCapability
from ...engine.exceptions import UninitializedSignerError, ValidationError
from ...engine.poller import ConfirmationPoller
from ...schemas.bases import canonical_json
from .broadcaster import broadcast_tx, broadcast_tx_and_wait
from .factory import TxFactory
from .node import CosmosNodeClient
from .protos import MsgCreateMetadata, MsgCreateNFTSchema
from .schemas import CosmosTransactionConfirmation

logger = logging.getLogger(__name__)

NFTMNGR_QUERY_ROUTE = "/thesixnetwork/sixprotocol/nftmngr"


def validate_schema_code(schema_code: str) -> str:
    """
    Check the ``{ORG}.{code}`` shape.

    Raises:
        ValidationError: If either part is missing.
    """
    org, _, code = (schema_code or "").partition(".")
    if not org or not code:
        raise ValidationError(
            f"schema code must look like '<org>.<code>', got {schema_code!r}",
            field="schema_code",
        )
    return schema_code


def schema_display_name(schema_code: str) -> str:
    """Schema name and description used on deploy: the code with dots as underscores."""
    return schema_code.replace(".", "_")


def _creator(identity: IdentityCapability) -> str:
    if not identity.chain_address:
        raise UninitializedSignerError(label=identity.label, address=identity.evm_address)
    return identity.chain_address


def _encode(document: Mapping[str, Any]) -> str:
    return base64.b64encode(canonical_json(dict(document)).encode("utf-8")).decode("ascii")


def build_schema_msg(identity: IdentityCapability, schema_code: str, schema: Mapping[str, Any]):
    """
    ``MsgCreateNFTSchema`` for ``schema`` deployed under ``schema_code``.

    ``code``, ``owner``, ``name`` and ``description`` of the document are
    overwritten; everything else is sent as given.
    """
    creator = _creator(identity)
    name = schema_display_name(validate_schema_code(schema_code))
    document = dict(schema)
    document.update(code=schema_code, owner=creator, name=name, description=name)
    return MsgCreateNFTSchema(creator=creator, nftSchemaBase64=_encode(document))


def build_metadata_msg(
    identity: IdentityCapability,
    schema_code: str,
    token_id: str,
    metadata: Mapping[str, Any],
):
    """
    ``MsgCreateMetadata`` minting ``token_id`` of a deployed schema.

    ``nft_schema_code`` and ``token_id`` of the document are set from the
    arguments; ``token_owner`` defaults to the signer.
    """
    creator = _creator(identity)
    validate_schema_code(schema_code)
    if not token_id:
        raise ValidationError("token id must not be empty", field="token_id")
    document = dict(metadata)
    document.update(nft_schema_code=schema_code, token_id=token_id)
    document.setdefault("token_owner", creator)
    return MsgCreateMetadata(
        creator=creator,
        nftSchemaCode=schema_code,
        tokenId=token_id,
        base64NFTData=_encode(document),
    )


async def deploy_certificate_schema(
    identity: IdentityCapability,
    factory: TxFactory,
    schema_code: str,
    schema: Mapping[str, Any],
) -> CosmosTransactionConfirmation:
    """
    Deploy a certificate schema.

    Raises:
        ValidationError: For a malformed schema code.
        Anything :func:`broadcast_tx` raises.
    """
    msg = build_schema_msg(identity, schema_code, schema)
    logger.info("Deploying schema %s from %s", schema_code, msg.creator)
    return await broadcast_tx(identity, factory, [msg])


async def deploy_certificate_schema_and_wait(
    identity: IdentityCapability,
    factory: TxFactory,
    schema_code: str,
    schema: Mapping[str, Any],
    poller: Optional[ConfirmationPoller] = None,
    *,
    cancel_event: Optional[asyncio.Event] = None,
) -> CosmosTransactionConfirmation:
    msg = build_schema_msg(identity, schema_code, schema)
    return await broadcast_tx_and_wait(identity, factory, [msg], poller, cancel_event=cancel_event)


async def create_certificate_metadata(
    identity: IdentityCapability,
    factory: TxFactory,
    schema_code: str,
    token_id: str,
    metadata: Mapping[str, Any],
) -> CosmosTransactionConfirmation:
    """
    Mint one metadata instance of a deployed schema.

    Raises:
        ValidationError: For a malformed schema code or an empty token id.
        Anything :func:`broadcast_tx` raises.
    """
    msg = build_metadata_msg(identity, schema_code, token_id, metadata)
    logger.info("Creating metadata %s/%s", schema_code, token_id)
    return await broadcast_tx(identity, factory, [msg])


async def create_certificate_metadata_and_wait(
    identity: IdentityCapability,
    factory: TxFactory,
    schema_code: str,
    token_id: str,
    metadata: Mapping[str, Any],
    poller: Optional[ConfirmationPoller] = None,
    *,
    cancel_event: Optional[asyncio.Event] = None,
) -> CosmosTransactionConfirmation:
    msg = build_metadata_msg(identity, schema_code, token_id, metadata)
    return await broadcast_tx_and_wait(identity, factory, [msg], poller, cancel_event=cancel_event)


async def get_certificate_schema(node: CosmosNodeClient, schema_code: str) -> Dict[str, Any]:
    """Deployed schema, as the node's ``nft_schema`` route returns it."""
    validate_schema_code(schema_code)
    return await node.query(f"{NFTMNGR_QUERY_ROUTE}/nft_schema/{schema_code}")


async def get_certificate_metadata(node: CosmosNodeClient, schema_code: str, token_id: str) -> Dict[str, Any]:
    """Metadata instance, as the node's ``nft_data`` route returns it."""
    validate_schema_code(schema_code)
    return await node.query(f"{NFTMNGR_QUERY_ROUTE}/nft_data/{schema_code}/{token_id}")
