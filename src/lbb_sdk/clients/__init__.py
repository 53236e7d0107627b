"""
Client module for the LBB SDK.

Provides the network handle shared by identities and transaction builders.
"""

from .client import ChainClient

__all__ = ["ChainClient"]
