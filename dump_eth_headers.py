# -----------------------------
# import deps
# -----------------------------
from prometheus_client import start_http_server
from eth_headers.config import load_settings
from eth_headers.dumper import dump_block_range
from eth_headers.exceptions import DumpError
from eth_headers.logging import log
from eth_headers.timer import timer


def main(environ=None):
    settings = load_settings(environ)

    # Prometheus metrics endpoint
    if settings.metrics_port:
        start_http_server(settings.metrics_port)

    try:
        with timer("dump_eth_headers"):
            dump_block_range(
                settings.dump_path,
                settings.start_block,
                settings.end_block,
                settings.eth_node_url,
                timeout=settings.rpc_timeout,
                poa=settings.poa_chain,
            )
    except DumpError as e:
        log.exception(
            "fatal_dump_error",
            extra={
                "block": e.block_number,
                "error_type": type(e).__name__,
            },
        )
        # non-zero exit for k8s / Dagster
        raise


# Entrypoint
if __name__ == "__main__":
    main()
