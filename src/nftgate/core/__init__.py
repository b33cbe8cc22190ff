# Ownership verification: challenge construction, signer recovery,
# the ledger client and the gate that combines them.
from .assets import AssetStore
from .gate import OwnershipGate
from .ledger import LedgerClient, Web3Ledger

__all__ = ["AssetStore", "LedgerClient", "OwnershipGate", "Web3Ledger"]
