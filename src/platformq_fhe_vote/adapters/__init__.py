"""
Ledger and wallet adapter implementations.
"""

from .abi import VOTING_CONTRACT_ABI
from .evm import EVMVotingContract, EVMTransactionHandle
from .wallet import LocalWallet

__all__ = [
    "VOTING_CONTRACT_ABI",
    "EVMVotingContract",
    "EVMTransactionHandle",
    "LocalWallet"
]
