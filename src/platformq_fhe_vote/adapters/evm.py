"""
EVM adapter for the confidential weighted voting contract.
Implements both the read and the write ledger surfaces with web3.py.
"""

import asyncio
import logging
from typing import Optional, Dict, Any, List

from web3 import AsyncWeb3, Web3
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..config import Settings
from ..models import TransactionResult
from ..types import PreconditionUnmetError, SignerUnavailableError
from ..utils import normalize_address
from .abi import VOTING_CONTRACT_ABI, output_names

logger = logging.getLogger(__name__)


class EVMTransactionHandle:
    """A submitted transaction that can be awaited until final"""

    def __init__(self, w3: AsyncWeb3, tx_hash: bytes, confirmations: int = 1,
                 timeout: float = 120.0, poll_interval: float = 1.0):
        self.w3 = w3
        self._tx_hash = tx_hash
        self.confirmations = confirmations
        self.timeout = timeout
        self.poll_interval = poll_interval

    @property
    def transaction_hash(self) -> str:
        return Web3.to_hex(self._tx_hash)

    async def await_finality(self) -> TransactionResult:
        receipt = await self.w3.eth.wait_for_transaction_receipt(
            self._tx_hash, timeout=self.timeout, poll_latency=self.poll_interval
        )
        block_number = receipt["blockNumber"]

        # Receipt inclusion counts as the first confirmation
        target_block = block_number + self.confirmations - 1
        while await self.w3.eth.block_number < target_block:
            await asyncio.sleep(self.poll_interval)

        return TransactionResult(
            transaction_hash=Web3.to_hex(receipt["transactionHash"]),
            block_number=block_number,
            gas_used=receipt.get("gasUsed", 0),
            succeeded=receipt["status"] == 1,
            logs=tuple(receipt.get("logs", [])),
        )


class EVMVotingContract:
    """web3.py binding of the deployed voting contract"""

    def __init__(self, w3: AsyncWeb3, address: str, chain_id: int,
                 account: Optional[LocalAccount] = None, confirmations: int = 1,
                 tx_timeout: float = 120.0):
        self.w3 = w3
        self._address = normalize_address(address)
        self.chain_id = chain_id
        self.account = account
        self.confirmations = confirmations
        self.tx_timeout = tx_timeout
        self._contract = w3.eth.contract(address=self._address, abi=VOTING_CONTRACT_ABI)
        self._connected = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "EVMVotingContract":
        if not settings.contract_address:
            raise PreconditionUnmetError("Contract address is not configured")
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(settings.rpc_url))
        account = Account.from_key(settings.private_key) if settings.private_key else None
        return cls(
            w3,
            settings.contract_address,
            settings.chain_id,
            account=account,
            confirmations=settings.confirmations,
            tx_timeout=settings.tx_timeout,
        )

    @property
    def address(self) -> str:
        return self._address

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> bool:
        """Connect to the node and check the chain id"""
        try:
            if await self.w3.is_connected():
                chain_id = await self.w3.eth.chain_id
                if chain_id != self.chain_id:
                    logger.warning(f"Chain ID mismatch: expected {self.chain_id}, got {chain_id}")
                self._connected = True
                logger.info(f"Connected to chain {chain_id} for contract {self._address}")
                return True
            logger.error("Failed to connect to ledger node")
            return False
        except Exception as e:
            logger.error(f"Error connecting to ledger node: {e}")
            return False

    async def disconnect(self) -> None:
        provider = self.w3.provider
        if hasattr(provider, "disconnect"):
            await provider.disconnect()
        self._connected = False

    async def signer(self) -> Optional["EVMVotingContract"]:
        """Write access, or None when no local account is configured"""
        return self if self.account is not None else None

    # Read surface

    async def get_all_proposal_ids(self) -> List[str]:
        return list(await self._contract.functions.getAllBusinessIds().call())

    async def get_proposal_data(self, external_id: str) -> Dict[str, Any]:
        values = await self._contract.functions.getBusinessData(external_id).call()
        return dict(zip(output_names("getBusinessData"), values))

    async def get_encrypted_value_handle(self, external_id: str) -> str:
        handle = await self._contract.functions.getEncryptedValue(external_id).call()
        return Web3.to_hex(handle)

    async def is_available(self) -> bool:
        return await self._contract.functions.isAvailable().call()

    # Write surface

    async def create_proposal(self, external_id: str, title: str,
                              encrypted_payload: bytes, proof: bytes,
                              plaintext_weight: int, secondary_value: int,
                              description: str) -> EVMTransactionHandle:
        function = self._contract.functions.createBusinessData(
            external_id,
            title,
            encrypted_payload,
            proof,
            plaintext_weight,
            secondary_value,
            description,
        )
        return await self._send(function)

    async def submit_verified_decryption(self, external_id: str,
                                         clear_values_encoded: bytes,
                                         proof: bytes) -> EVMTransactionHandle:
        function = self._contract.functions.verifyDecryption(
            external_id, clear_values_encoded, proof
        )
        return await self._send(function)

    async def _send(self, function) -> EVMTransactionHandle:
        if self.account is None:
            raise SignerUnavailableError()

        sender = self.account.address
        tx = await function.build_transaction({
            "from": sender,
            "nonce": await self.w3.eth.get_transaction_count(sender, "pending"),
            "chainId": self.chain_id,
        })
        signed = self.account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        logger.debug(f"Sent transaction {Web3.to_hex(tx_hash)} from {sender}")

        return EVMTransactionHandle(
            self.w3, tx_hash, confirmations=self.confirmations, timeout=self.tx_timeout
        )
