from .base import BaseManager
from .bridge import BridgeManager
from .contract import ContractManager
from .wallet import WalletManager

__all__ = ['BaseManager', 'BridgeManager', 'ContractManager', 'WalletManager']
