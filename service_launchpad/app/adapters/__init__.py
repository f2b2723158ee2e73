from .ai_client import AiTaglineClient
from .pool_discovery import PoolDiscovery, PoolLookup, USDC_MINT
from .solana_rpc import MintAuthorities, SolanaRpcClient, is_valid_pubkey, validate_pubkey

__all__ = [
    "AiTaglineClient",
    "PoolDiscovery",
    "PoolLookup",
    "USDC_MINT",
    "MintAuthorities",
    "SolanaRpcClient",
    "is_valid_pubkey",
    "validate_pubkey",
]
