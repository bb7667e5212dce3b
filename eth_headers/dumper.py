import os
import json
import time
from contextlib import contextmanager
from dataclasses import dataclass
from eth_headers.exceptions import BlockFetchError, BlockWriteError
from eth_headers.logging import log
from eth_headers.metrics import (
    BLOCKS_DUMPED,
    LAST_DUMPED_BLOCK,
    RPC_REQUESTS,
    RPC_ERRORS,
    FETCH_SECONDS,
    WRITE_ERRORS,
)
from eth_headers.rpc_context import set_current_rpc, clear_current_rpc
from eth_headers.web3_utils import connect_web3, close_provider, rpc_label, to_json_safe


@dataclass(frozen=True)
class DumpRequest:
    output_dir: str
    start_block: int
    end_block: int
    endpoint: str

    def __post_init__(self):
        for name in ("start_block", "end_block"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got: {value!r}")
        if self.start_block < 0:
            raise ValueError(f"start_block must be >= 0, got: {self.start_block}")
        if self.end_block < self.start_block:
            raise ValueError(
                f"Invalid block range: {self.start_block} > {self.end_block}"
            )

    @property
    def block_count(self) -> int:
        return self.end_block - self.start_block + 1

    def block_numbers(self):
        return range(self.start_block, self.end_block + 1)


def block_path(output_dir, block_number: int) -> str:
    return os.path.join(output_dir, f"{block_number}.json")


# -----------------------------
# Connection scope
# -----------------------------
@contextmanager
def node_connection(endpoint: str, timeout: float = 10, poa: bool = False):
    """
    Yield a connected Web3 for the duration of a run.

    The provider is always released on exit, best-effort: a transport
    without an explicit close is left alone and close failures are dropped.
    """
    label = rpc_label(endpoint)
    set_current_rpc(label)
    try:
        w3 = connect_web3(endpoint, timeout=timeout, poa=poa)
    except Exception:
        log.error("node_connect_failed", extra={"endpoint": label})
        clear_current_rpc()
        raise

    try:
        yield w3
    finally:
        close_provider(w3.provider)
        clear_current_rpc()


# -----------------------------
# Fetch block
# -----------------------------
def fetch_block(w3, block_number: int, rpc: str = "unknown") -> dict:
    """
    Fetch one block (transaction hashes only) and return it JSON-safe.

    Raises:
        BlockFetchError on RPC failure or an empty / malformed descriptor
    """
    RPC_REQUESTS.labels(rpc=rpc).inc()
    start = time.perf_counter()
    try:
        block = w3.eth.get_block(block_number, full_transactions=False)
    except Exception as e:
        RPC_ERRORS.labels(rpc=rpc).inc()
        raise BlockFetchError(
            f"Failed to fetch block {block_number}: {e}", block_number
        ) from e
    finally:
        FETCH_SECONDS.labels(rpc=rpc).observe(time.perf_counter() - start)

    if block is None:
        RPC_ERRORS.labels(rpc=rpc).inc()
        raise BlockFetchError(f"Node returned no block {block_number}", block_number)

    try:
        return to_json_safe(dict(block))
    except (TypeError, ValueError) as e:
        raise BlockFetchError(
            f"Malformed descriptor for block {block_number}: {e}", block_number
        ) from e


# -----------------------------
# Save block
# -----------------------------
def save_block(block_number: int, block: dict, output_dir) -> str:
    """Write `<output_dir>/<block_number>.json`, replacing any previous file."""
    try:
        payload = json.dumps(block)
    except (TypeError, ValueError) as e:
        raise BlockFetchError(
            f"Block {block_number} is not JSON serializable: {e}", block_number
        ) from e

    path = block_path(output_dir, block_number)
    tmp_path = os.path.join(output_dir, f".{block_number}.json.{os.getpid()}.tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(payload)
        # the previous <n>.json survives a failed write
        os.replace(tmp_path, path)
    except OSError as e:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise BlockWriteError(
            f"Failed to write block {block_number} to {path}: {e}", block_number
        ) from e
    return path


# -----------------------------
# Dump main logic
# -----------------------------
def dump_block_range(
    output_dir,
    start_block: int,
    end_block: int,
    endpoint: str,
    *,
    timeout: float = 10,
    poa: bool = False,
):
    """
    Download blocks [start_block, end_block] in order, one `<n>.json` each.

    Strictly sequential: block n+1 is requested only after block n was
    written. The first failure aborts the run, files for earlier blocks
    stay on disk.

    Raises:
        NodeConnectionError: the node cannot be reached at start
        BlockFetchError: a block fetch failed (carries block_number)
        BlockWriteError: a block file could not be written (carries block_number)
    """
    request = DumpRequest(
        output_dir=os.fspath(output_dir),
        start_block=start_block,
        end_block=end_block,
        endpoint=endpoint,
    )
    rpc = rpc_label(request.endpoint)

    with node_connection(request.endpoint, timeout=timeout, poa=poa) as w3:
        log.info(
            "dump_started",
            extra={
                "output_dir": request.output_dir,
                "start_block": request.start_block,
                "end_block": request.end_block,
                "block_count": request.block_count,
            },
        )

        for bn in request.block_numbers():
            try:
                block = fetch_block(w3, bn, rpc=rpc)
                path = save_block(bn, block, request.output_dir)
            except BlockWriteError as e:
                WRITE_ERRORS.labels(rpc=rpc).inc()
                log.error(
                    "block_write_failed",
                    extra={"block": bn, "error": str(e.__cause__ or e)[:200]},
                )
                raise
            except BlockFetchError as e:
                log.error(
                    "block_fetch_failed",
                    extra={"block": bn, "error": str(e.__cause__ or e)[:200]},
                )
                raise

            BLOCKS_DUMPED.labels(rpc=rpc).inc()
            LAST_DUMPED_BLOCK.labels(rpc=rpc).set(bn)
            log.debug("block_dumped", extra={"block": bn, "path": path})

        log.info(
            "dump_finished",
            extra={
                "start_block": request.start_block,
                "end_block": request.end_block,
                "block_count": request.block_count,
            },
        )
