"""
ABI of the confidential weighted voting contract.
"""

VOTING_CONTRACT_ABI = [
    {
        "type": "function",
        "name": "getAllBusinessIds",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string[]"}],
    },
    {
        "type": "function",
        "name": "getBusinessData",
        "stateMutability": "view",
        "inputs": [{"name": "businessId", "type": "string"}],
        "outputs": [
            {"name": "name", "type": "string"},
            {"name": "description", "type": "string"},
            {"name": "publicValue1", "type": "uint256"},
            {"name": "publicValue2", "type": "uint256"},
            {"name": "timestamp", "type": "uint256"},
            {"name": "creator", "type": "address"},
            {"name": "isVerified", "type": "bool"},
            {"name": "decryptedValue", "type": "uint32"},
        ],
    },
    {
        "type": "function",
        "name": "getEncryptedValue",
        "stateMutability": "view",
        "inputs": [{"name": "businessId", "type": "string"}],
        "outputs": [{"name": "", "type": "bytes32"}],
    },
    {
        "type": "function",
        "name": "isAvailable",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "createBusinessData",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "businessId", "type": "string"},
            {"name": "name", "type": "string"},
            {"name": "encryptedValue", "type": "bytes32"},
            {"name": "inputProof", "type": "bytes"},
            {"name": "publicValue1", "type": "uint256"},
            {"name": "publicValue2", "type": "uint256"},
            {"name": "description", "type": "string"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "verifyDecryption",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "businessId", "type": "string"},
            {"name": "abiEncodedClearValue", "type": "bytes"},
            {"name": "decryptionProof", "type": "bytes"},
        ],
        "outputs": [],
    },
]


def output_names(function_name: str) -> list:
    """Names of a function's outputs, in declaration order"""
    entry = next((item for item in VOTING_CONTRACT_ABI if item.get("name") == function_name), None)
    if entry is None:
        raise ValueError(f"Function {function_name} not found in ABI")
    return [output["name"] for output in entry["outputs"]]
