from contextlib import contextmanager
import time
from eth_headers.logging import log

@contextmanager
def timer(name="dump"):
    start_perf = time.perf_counter()
    log.info("run_timer", extra={"timer": name, "phase": "start"})
    try:
        yield
    finally:
        cost = time.perf_counter() - start_perf
        log.info(
            "run_timer",
            extra={"timer": name, "phase": "end", "cost_sec": round(cost, 3)},
        )

# how to use:
# with timer("dump_block_range"):
#     dump_block_range(...)
