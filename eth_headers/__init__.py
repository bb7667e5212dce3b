# dump
from eth_headers.dumper import DumpRequest, dump_block_range

# errors
from eth_headers.exceptions import (
    DumpError,
    NodeConnectionError,
    BlockFetchError,
    BlockWriteError,
)

__all__ = [
    # dump
    "DumpRequest",
    "dump_block_range",

    # errors
    "DumpError",
    "NodeConnectionError",
    "BlockFetchError",
    "BlockWriteError",
]
