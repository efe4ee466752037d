"""
Superfluid protocol ABIs.

Only the fragments the bot calls are included.
"""

BATCH_LIQUIDATOR_ABI = [
    {
        "inputs": [
            {"internalType": "address", "name": "superToken", "type": "address"},
            {
                "components": [
                    {"internalType": "enum BatchLiquidator.FlowType", "name": "agreementOperation", "type": "uint8"},
                    {"internalType": "address", "name": "sender", "type": "address"},
                    {"internalType": "address", "name": "receiver", "type": "address"},
                ],
                "internalType": "struct BatchLiquidator.FlowLiquidationData[]",
                "name": "data",
                "type": "tuple[]",
            },
        ],
        "name": "deleteFlows",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

GDA_V1_FORWARDER_ABI = [
    {
        "inputs": [
            {"internalType": "contract ISuperfluidToken", "name": "token", "type": "address"},
            {"internalType": "address", "name": "from", "type": "address"},
            {"internalType": "contract ISuperfluidPool", "name": "to", "type": "address"},
        ],
        "name": "getFlowDistributionFlowRate",
        "outputs": [{"internalType": "int96", "name": "", "type": "int96"}],
        "stateMutability": "view",
        "type": "function",
    },
]

SUPER_TOKEN_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "name": "realtimeBalanceOfNow",
        "outputs": [
            {"internalType": "int256", "name": "availableBalance", "type": "int256"},
            {"internalType": "uint256", "name": "deposit", "type": "uint256"},
            {"internalType": "uint256", "name": "owedDeposit", "type": "uint256"},
            {"internalType": "uint256", "name": "timestamp", "type": "uint256"},
        ],
        "stateMutability": "view",
        "type": "function",
    },
]
