"""Wait until one or more chain nodes report a block height above a threshold."""

from __future__ import annotations

import http.client
import json
import logging
import os
import re
import time
import urllib.error
import urllib.request
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

POLL_INTERVAL = 5.0
HTTP_TIMEOUT = 1.0
MIN_BLOCKS = 5

_log = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_RFC3339_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})"
)


def _atoi(text: str) -> int | None:
    if not _INT_RE.fullmatch(text):
        return None
    return int(text)


def _parse_time(text: str) -> datetime:
    match = _RFC3339_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid time: {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micros = int((fraction or "")[:6].ljust(6, "0"))
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        tz = timezone(sign * offset)
    return datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tzinfo=tz
    )


def _field(obj: dict, key: str, kind: type, default):
    value = obj.get(key)
    if value is None:
        return default
    if kind is int and isinstance(value, bool):
        raise ValueError(f"field {key!r} must be an integer")
    if not isinstance(value, kind):
        raise ValueError(f"field {key!r} has the wrong type: {type(value).__name__}")
    return value


def _time_field(obj: dict, key: str) -> datetime | None:
    value = _field(obj, key, str, None)
    return None if value is None else _parse_time(value)


@dataclass
class SyncInfo:
    """Synchronisation state reported by a node."""

    latest_block_hash: str = ""
    latest_app_hash: str = ""
    latest_block_height: str = ""
    latest_block_time: datetime | None = None
    earliest_block_hash: str = ""
    earliest_app_hash: str = ""
    earliest_block_height: str = ""
    earliest_block_time: datetime | None = None
    catching_up: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> SyncInfo:
        return cls(
            latest_block_hash=_field(data, "latest_block_hash", str, ""),
            latest_app_hash=_field(data, "latest_app_hash", str, ""),
            latest_block_height=_field(data, "latest_block_height", str, ""),
            latest_block_time=_time_field(data, "latest_block_time"),
            earliest_block_hash=_field(data, "earliest_block_hash", str, ""),
            earliest_app_hash=_field(data, "earliest_app_hash", str, ""),
            earliest_block_height=_field(data, "earliest_block_height", str, ""),
            earliest_block_time=_time_field(data, "earliest_block_time"),
            catching_up=_field(data, "catching_up", bool, False),
        )


@dataclass
class ChainStatus:
    """The parts of a node's ``/status`` reply that readiness depends on."""

    jsonrpc: str = ""
    id: int = 0
    sync_info: SyncInfo = field(default_factory=SyncInfo)

    @classmethod
    def from_json(cls, data) -> ChainStatus:
        """Decode a ``/status`` reply; raises ``ValueError`` when it is malformed."""
        payload = json.loads(data)
        if not isinstance(payload, dict):
            raise ValueError("status reply must be a JSON object")
        result = _field(payload, "result", dict, {})
        return cls(
            jsonrpc=_field(payload, "jsonrpc", str, ""),
            id=_field(payload, "id", int, 0),
            sync_info=SyncInfo.from_dict(_field(result, "sync_info", dict, {})),
        )


def _poll(url: str, blocks: int) -> bool:
    try:
        with urllib.request.urlopen(f"{url}/status", timeout=HTTP_TIMEOUT) as response:
            if response.status != 200:
                return False
            raw = response.read()
    except urllib.error.HTTPError as exc:
        exc.close()
        return False
    except (OSError, http.client.HTTPException) as exc:
        _log.info("%s", exc)
        return False

    try:
        status = ChainStatus.from_json(raw)
    except ValueError as exc:
        _log.info("%s: error decoding response %s", url, exc)
        return False

    height_text = status.sync_info.latest_block_height
    height = _atoi(height_text)
    if height is not None and height > blocks:
        _log.info("%s: chain is ready", url)
        return True
    _log.info("%s latest block: %s", url, height_text)
    return False


def wait_for(timeout, blocks, url) -> None:
    """Poll ``url`` until its latest block height exceeds ``blocks``.

    Polls every ``POLL_INTERVAL`` seconds, the first poll one interval after
    the start. Raises ``TimeoutError`` once ``timeout`` seconds have passed.
    """
    interval = POLL_INTERVAL
    start = time.monotonic()
    deadline = start + timeout
    ticks = 0
    while True:
        ticks += 1
        next_tick = start + ticks * interval
        if next_tick >= deadline:
            time.sleep(max(0.0, deadline - time.monotonic()))
            raise TimeoutError(f"timed out waiting for {url}")
        time.sleep(max(0.0, next_tick - time.monotonic()))
        if _poll(url, blocks):
            return
        # Ticks missed while a poll was running are dropped.
        ticks = max(ticks, int((time.monotonic() - start) // interval))


def _exists(path: str) -> bool:
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError:
        return True
    return True


def main(argv=None) -> int:
    """Run the checker configured by ``PLUGIN_*`` environment variables."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    environ = os.environ

    check_file = environ.get("PLUGIN_CHECK_FILE", "")
    if check_file and not _exists(check_file):
        _log.error("check file doesn't exists")
        return 1

    chain_list = environ.get("PLUGIN_CHAIN_LIST", "")
    if not chain_list:
        _log.error("must provide at least one chain")
        return 1
    chains = chain_list.split(",")

    timeout = _atoi(environ.get("PLUGIN_TIMEOUT", ""))
    if timeout is None:
        _log.error("must provide a valid timeout")
        return 1

    blocks = _atoi(environ.get("PLUGIN_BLOCKS", ""))
    if blocks is None or blocks < MIN_BLOCKS:
        blocks = MIN_BLOCKS

    executor = ThreadPoolExecutor(max_workers=len(chains))
    futures = []
    for chain in chains:
        _log.info("wait for %s %d", chain, timeout)
        futures.append(executor.submit(wait_for, timeout, blocks, chain))
    try:
        for future in as_completed(futures):
            try:
                future.result()
            except Exception as exc:
                _log.error("%s", exc)
                return 1
    finally:
        executor.shutdown(wait=False, cancel_futures=True)
    return 0