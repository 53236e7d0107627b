"""
Discriminated union tests for transaction results.
"""

from lbb_sdk.adapters.cosmos.schemas import CosmosTransactionConfirmation
from lbb_sdk.adapters.evm.schemas import EVMTransactionConfirmation
from lbb_sdk.adapters.unions import parse_confirmation
from lbb_sdk.schemas.bases import TransactionStatus

from mocks import make_receipt, make_tx_response


class TestParseConfirmation:

    def test_evm_result(self):
        result = EVMTransactionConfirmation.from_receipt(make_receipt())
        restored = parse_confirmation(result.to_canonical_json())
        assert isinstance(restored, EVMTransactionConfirmation)
        assert restored.tx_hash == result.tx_hash
        assert restored.is_success()

    def test_cosmos_result(self):
        result = CosmosTransactionConfirmation.from_tx_response(make_tx_response(code=3))
        restored = parse_confirmation(result.model_dump())
        assert isinstance(restored, CosmosTransactionConfirmation)
        assert restored.status is TransactionStatus.FAILED
        assert restored.code == 3
        assert "insufficient funds" in restored.get_confirmation_status()
