import os
from dataclasses import dataclass
from typing import Mapping, Optional

TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    dump_path: str
    start_block: int
    end_block: int
    eth_node_url: str
    rpc_timeout: float = 10.0
    poa_chain: bool = False
    metrics_port: int = 0


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if not value:
        raise RuntimeError(f"Missing required env var: {name}")
    return value


def _block(env: Mapping[str, str], name: str) -> int:
    raw = _required(env, name)
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got: {raw!r}") from None
    if value < 0:
        raise RuntimeError(f"{name} must be >= 0, got: {value}")
    return value


def _number(env: Mapping[str, str], name: str, default: str, cast):
    raw = env.get(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got: {raw!r}") from None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Required:
      DUMP_PATH, START_BLOCK, END_BLOCK, ETH_NODE_URL
    Optional:
      RPC_TIMEOUT (10), POA_CHAIN (false), METRICS_PORT (0 = disabled)
    """
    env = os.environ if environ is None else environ

    start_block = _block(env, "START_BLOCK")
    end_block = _block(env, "END_BLOCK")
    if start_block > end_block:
        raise RuntimeError(
            f"Invalid block range: {start_block} > {end_block}"
        )

    return Settings(
        dump_path=_required(env, "DUMP_PATH"),
        start_block=start_block,
        end_block=end_block,
        eth_node_url=_required(env, "ETH_NODE_URL"),
        rpc_timeout=_number(env, "RPC_TIMEOUT", "10", float),
        poa_chain=env.get("POA_CHAIN", "false").strip().lower() in TRUE_VALUES,
        metrics_port=_number(env, "METRICS_PORT", "0", int),
    )
