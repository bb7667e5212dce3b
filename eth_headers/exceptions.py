from typing import Optional


class DumpError(Exception):
    """Base error for a block range dump. Carries the failing block, if any."""

    def __init__(self, message: str, block_number: Optional[int] = None):
        super().__init__(message)
        self.block_number = block_number


class NodeConnectionError(DumpError, ConnectionError):
    """The node endpoint could not be reached, or its URI is unusable."""


class BlockFetchError(DumpError):
    """eth_getBlockByNumber failed or returned an unusable descriptor."""


class BlockWriteError(DumpError):
    """The block file could not be written."""
