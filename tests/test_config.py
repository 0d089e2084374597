"""Tests for configuration and store factory"""
import pytest

from storefront.cart import CartStore, FileSlot, LoggingNotifier, MemorySlot, NullNotifier, RecordingNotifier
from storefront.cart.service import create_cart_store
from storefront.config import CartSettings, load_settings


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Environment without any CART_* overrides"""
    for name in (
        "CART_STORAGE_BACKEND",
        "CART_STORAGE_DIR",
        "CART_STORAGE_KEY",
        "CART_REDIS_TTL",
        "CART_NOTIFIER",
    ):
        # setenv first so values written by load_dotenv are undone too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self, clean_env, tmp_path):
        settings = load_settings(env_file=str(tmp_path / "missing.env"))

        assert settings == CartSettings()
        assert settings.storage_backend == "file"
        assert settings.redis_ttl is None

    def test_from_environment(self, clean_env, tmp_path):
        clean_env.setenv("CART_STORAGE_BACKEND", "Redis")
        clean_env.setenv("CART_STORAGE_KEY", "guest")
        clean_env.setenv("CART_REDIS_TTL", "600")
        clean_env.setenv("CART_NOTIFIER", "none")

        settings = load_settings(env_file=str(tmp_path / "missing.env"))

        assert settings.storage_backend == "redis"
        assert settings.storage_key == "guest"
        assert settings.redis_ttl == 600
        assert settings.notifier == "none"

    def test_from_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("CART_STORAGE_BACKEND=memory\nCART_STORAGE_KEY=from-file\n")

        settings = load_settings(env_file=str(env_file))

        assert settings.storage_backend == "memory"
        assert settings.storage_key == "from-file"

    def test_zero_ttl_means_no_expiry(self, clean_env, tmp_path):
        clean_env.setenv("CART_REDIS_TTL", "0")

        assert load_settings(env_file=str(tmp_path / "missing.env")).redis_ttl is None

    def test_invalid_ttl(self, clean_env, tmp_path):
        clean_env.setenv("CART_REDIS_TTL", "soon")

        with pytest.raises(ValueError):
            load_settings(env_file=str(tmp_path / "missing.env"))

    def test_unknown_backend(self, clean_env, tmp_path):
        clean_env.setenv("CART_STORAGE_BACKEND", "cookies")

        with pytest.raises(ValueError):
            load_settings(env_file=str(tmp_path / "missing.env"))


class TestCreateCartStore:
    """Tests for create_cart_store."""

    def test_memory_store(self):
        store = create_cart_store(CartSettings(storage_backend="memory", notifier="none"))

        assert isinstance(store, CartStore)
        assert isinstance(store._persistence.slot, MemorySlot)
        assert isinstance(store._notifier, NullNotifier)

    def test_file_store_survives_restart(self, tmp_path):
        settings = CartSettings(storage_backend="file", storage_dir=str(tmp_path))

        first = create_cart_store(settings)
        first.add_item({"id": "A", "unitPrice": 4})
        first.add_item({"id": "A", "unitPrice": 4})

        second = create_cart_store(settings)
        assert isinstance(second._persistence.slot, FileSlot)
        assert isinstance(second._notifier, LoggingNotifier)
        assert second.get_item("A").quantity == 2

    def test_notifier_override(self):
        recorder = RecordingNotifier()
        store = create_cart_store(CartSettings(storage_backend="memory"), notifier=recorder)

        store.add_item({"id": "A", "title": "Hat", "unitPrice": 4})

        assert recorder.messages == ["Hat added to Cart"]

    def test_settings_from_environment(self, monkeypatch):
        monkeypatch.setenv("CART_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("CART_NOTIFIER", "none")

        store = create_cart_store()

        assert isinstance(store._persistence.slot, MemorySlot)
