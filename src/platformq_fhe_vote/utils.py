"""
Utility functions for ledger addresses.
"""

from eth_utils import to_checksum_address, is_address


def normalize_address(address: str) -> str:
    """Normalize an EVM address to its checksum form"""
    if not is_address(address):
        raise ValueError(f"Invalid address: {address}")
    return to_checksum_address(address)
