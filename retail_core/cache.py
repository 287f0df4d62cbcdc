"""On-disk cache for ERC20 metadata, which never changes once a token is deployed."""

import hashlib
import json
import os
import shutil
import sys
from pathlib import Path
from typing import Any

from retail_core.constants import CACHE_DIR_NAME, CACHE_VERSION


def get_cache_dir() -> Path:
    """Cache root: $XDG_CACHE_HOME/<name>, falling back to ~/.cache/<name>."""
    base = Path(os.getenv("XDG_CACHE_HOME") or Path.home() / ".cache")
    cache_dir = base / CACHE_DIR_NAME
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def clear_cache() -> None:
    cache_dir = get_cache_dir()
    entries = sum(1 for _ in cache_dir.glob("*.json"))
    shutil.rmtree(cache_dir)
    print(f"✅ Cache cleared ({entries} entries removed from {cache_dir}).", file=sys.stderr)


def metadata_key(chain_id: int, token: str) -> str:
    """Stable file name for a token's metadata; checksum and lowercase addresses share it."""
    raw = f"erc20:{CACHE_VERSION}:{chain_id}:{token.lower()}"
    return hashlib.sha256(raw.encode()).hexdigest()


def _entry_path(key: str) -> Path:
    return get_cache_dir() / f"{key}.json"


def load_token_metadata(chain_id: int, token: str) -> dict[str, Any] | None:
    """Cached {"decimals", "symbol"} for `token`, or None on a miss or a malformed entry."""
    path = _entry_path(metadata_key(chain_id, token))
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    if not isinstance(data.get("decimals"), int) or not isinstance(data.get("symbol"), str):
        return None
    return data


def store_token_metadata(chain_id: int, token: str, decimals: int, symbol: str) -> None:
    """Best effort: an unwritable cache only costs a repeated RPC call."""
    path = _entry_path(metadata_key(chain_id, token))
    try:
        with path.open("w", encoding="utf-8") as f:
            json.dump({"decimals": decimals, "symbol": symbol}, f, ensure_ascii=False, separators=(",", ":"))
    except OSError as ex:
        print(f"⚠️  Could not write metadata cache for {token}: {ex}", file=sys.stderr)
