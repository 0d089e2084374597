"""Cart engine configuration loaded from the environment."""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from storefront.errors import ERROR_UNKNOWN_BACKEND


STORAGE_BACKENDS = ("memory", "file", "redis")
NOTIFIERS = ("log", "none")


@dataclass(frozen=True)
class CartSettings:
    """Settings for wiring a CartStore."""
    storage_backend: str = "file"
    storage_dir: str = ".storefront"
    storage_key: str = "cart"
    redis_ttl: Optional[int] = None  # seconds, None = never expire
    notifier: str = "log"

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(f"{ERROR_UNKNOWN_BACKEND}: {self.storage_backend}")
        if self.notifier not in NOTIFIERS:
            raise ValueError(f"Unknown notifier: {self.notifier}")


def _get_optional_int(name: str) -> Optional[int]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer number of seconds, got {raw!r}")
    return value if value > 0 else None


def load_settings(env_file: Optional[str] = None) -> CartSettings:
    """
    Build CartSettings from environment variables.

    A local .env file is loaded first; variables already present in the
    environment take precedence over it.

    Environment:
        CART_STORAGE_BACKEND: memory | file | redis (default: file)
        CART_STORAGE_DIR: directory for the file backend (default: .storefront)
        CART_STORAGE_KEY: slot name (default: cart)
        CART_REDIS_TTL: expiry for the redis backend in seconds (default: none)
        CART_NOTIFIER: log | none (default: log)
    """
    load_dotenv(env_file)

    return CartSettings(
        storage_backend=os.environ.get("CART_STORAGE_BACKEND", "file").strip().lower(),
        storage_dir=os.environ.get("CART_STORAGE_DIR", ".storefront"),
        storage_key=os.environ.get("CART_STORAGE_KEY", "cart"),
        redis_ttl=_get_optional_int("CART_REDIS_TTL"),
        notifier=os.environ.get("CART_NOTIFIER", "log").strip().lower(),
    )
