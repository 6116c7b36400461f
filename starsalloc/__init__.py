"""Inflation allocation: params, messages, keeper, contract message encoding and test-network tools."""

__version__ = "0.1.0"

__all__ = [
    "address",
    "coins",
    "keys",
    "params",
    "messages",
    "keeper",
    "module",
    "wasm",
    "readiness",
    "watcher",
]