from prometheus_client import Counter, Gauge, Histogram

# -----------------------------
# Throughput
# -----------------------------
BLOCKS_DUMPED = Counter(
    "eth_headers_blocks_dumped_total",
    "Total number of blocks written to disk",
    ["rpc"],
)
LAST_DUMPED_BLOCK = Gauge(
    "eth_headers_last_dumped_block",
    "Last block number written to disk",
    ["rpc"],
)

# -----------------------------
# RPC
# -----------------------------
RPC_REQUESTS = Counter(
    "eth_headers_rpc_requests_total",
    "eth_getBlockByNumber requests by endpoint",
    ["rpc"],
)
RPC_ERRORS = Counter(
    "eth_headers_rpc_errors_total",
    "eth_getBlockByNumber failures by endpoint",
    ["rpc"],
)
FETCH_SECONDS = Histogram(
    "eth_headers_fetch_seconds",
    "Latency of a single block fetch",
    ["rpc"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)

# -----------------------------
# Filesystem
# -----------------------------
WRITE_ERRORS = Counter(
    "eth_headers_write_errors_total",
    "Block files that could not be written",
    ["rpc"],
)
