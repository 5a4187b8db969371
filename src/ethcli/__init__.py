"""Command line client for Ethereum JSON-RPC nodes"""

LOGGER_NAME = "ethcli"
