import os
import asyncio
from urllib.parse import urlsplit
from hexbytes import HexBytes
from web3 import Web3, IPCProvider, LegacyWebSocketProvider
from web3.datastructures import AttributeDict
from web3.middleware import ExtraDataToPOAMiddleware
from eth_headers.exceptions import NodeConnectionError
from eth_headers.logging import log

HTTP_SCHEMES = ("http", "https")
WS_SCHEMES = ("ws", "wss")

# -----------------------------
# JSON safe serialization
# -----------------------------
def to_json_safe(obj):
    if isinstance(obj, (HexBytes, bytes, bytearray)):
        return Web3.to_hex(obj)
    elif isinstance(obj, AttributeDict):
        return {k: to_json_safe(v) for k, v in obj.items()}
    elif isinstance(obj, dict):
        return {k: to_json_safe(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [to_json_safe(v) for v in obj]
    else:
        return obj

# -----------------------------
# Endpoint label (no credentials)
# -----------------------------
def rpc_label(endpoint: str) -> str:
    """
    Endpoint name safe for logs and metric labels.

    Provider keys usually live in the path (infura /v3/<key>) or in the
    userinfo part, so only scheme, host and port are kept.
    """
    try:
        parts = urlsplit(endpoint)
        scheme = parts.scheme.lower()
        port = parts.port
    except ValueError as e:
        # never echo the endpoint, it may carry a key
        raise NodeConnectionError(f"Malformed node endpoint: {e}") from None

    if scheme in HTTP_SCHEMES + WS_SCHEMES:
        host = parts.hostname or ""
        port = f":{port}" if port else ""
        return f"{scheme}://{host}{port}"
    return f"ipc://{os.path.basename(endpoint)}"

# -----------------------------
# Provider selection by URI scheme
# -----------------------------
def build_provider(endpoint: str, timeout: float = 10):
    scheme = urlsplit(endpoint).scheme.lower()

    if scheme in HTTP_SCHEMES:
        return Web3.HTTPProvider(endpoint, request_kwargs={"timeout": timeout})

    if scheme in WS_SCHEMES:
        return LegacyWebSocketProvider(endpoint, websocket_timeout=timeout)

    if endpoint.endswith(".ipc"):
        return IPCProvider(endpoint, timeout=timeout)

    raise NodeConnectionError(f"Unsupported node endpoint: {rpc_label(endpoint)}")


def connect_web3(endpoint: str, timeout: float = 10, poa: bool = False) -> Web3:
    """
    Open a Web3 connection and make sure the node answers.

    Raises:
        NodeConnectionError if the node is unreachable at start
    """
    provider = build_provider(endpoint, timeout)
    w3 = Web3(provider)
    if poa:
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    if not w3.is_connected():
        close_provider(provider)
        raise NodeConnectionError(
            f"Cannot connect to Ethereum RPC at {rpc_label(endpoint)}"
        )
    return w3


def close_provider(provider, timeout: float = 5) -> bool:
    """
    Best-effort close of the transport. Never raises.

    Only persistent transports (WebSocket) hold a connection; HTTP and IPC
    providers have nothing to close and are skipped.

    Returns:
        True if a close was issued and did not fail
    """
    try:
        closer = getattr(provider, "disconnect", None) or getattr(provider, "close", None)
        if callable(closer):
            result = closer()
            if asyncio.iscoroutine(result):
                asyncio.run(result)
            return True

        # LegacyWebSocketProvider keeps its socket on a background event loop
        ws = getattr(getattr(provider, "conn", None), "ws", None)
        loop = getattr(provider, "_loop", None)
        if ws is not None and loop is not None:
            asyncio.run_coroutine_threadsafe(ws.close(), loop).result(timeout)
            return True

    except Exception as e:
        log.debug(
            "provider_close_failed",
            extra={
                "provider": type(provider).__name__,
                "error": str(e)[:200],
            },
        )
        return False

    log.debug(
        "provider_close_skipped",
        extra={"provider": type(provider).__name__},
    )
    return False

