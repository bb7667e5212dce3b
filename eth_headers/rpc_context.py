# rpc_context.py
import threading

_rpc_ctx = threading.local()

def set_current_rpc(name):
    _rpc_ctx.name = name

def clear_current_rpc():
    _rpc_ctx.__dict__.pop("name", None)

def get_current_rpc():
    return getattr(_rpc_ctx, "name", "unknown")
