"""Multi-chain crypto portfolio tracker with a periodic sync engine."""
__version__ = "0.1.0"
