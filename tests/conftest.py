import pytest
from typer.testing import CliRunner
from pathlib import Path

from vaultcache.core.cache import Cache
from vaultcache.infrastructure.cli.display import ConsoleDisplay
from vaultcache.infrastructure.config import settings
from vaultcache.infrastructure.crypto.key_manager import KeyManager
from vaultcache.infrastructure.storage.file_storage import FileStorage

CACHE_ENV_VARS = (
    "CACHE_ENCRYPTION_KEY",
    "CACHE_ENCRYPTION_ENABLED",
    "CACHE_ENCRYPTION_ALGORITHM",
    "CACHE_FILE_PERMISSIONS",
    "CACHE_DIR_PERMISSIONS",
    "CACHE_PATH",
    "CACHE_PREFIX",
    "CACHE_ENABLED",
    "LOGGING_LEVEL",
    "LOGGING_FILE",
    "LOGGING_FORMAT",
)

@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keeps tests independent of the developer's environment, .env and config.yaml."""
    for name in CACHE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    settings.reset_configuration()
    settings.clear_test_config()
    # Pretend configuration was already loaded so no real files are read
    monkeypatch.setattr(settings, "_loaded", True)
    yield
    settings.clear_test_config()
    settings.reset_configuration()

@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()

@pytest.fixture
def encryption_key() -> str:
    return KeyManager.generate_key()

@pytest.fixture
def key_manager(encryption_key: str) -> KeyManager:
    """A key manager holding a freshly generated key."""
    manager = KeyManager()
    manager.set_encryption_key(encryption_key)
    return manager

@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """A cache root that does not exist yet; the first store creates it."""
    return tmp_path / "cache"

@pytest.fixture
def storage(cache_dir: Path, key_manager: KeyManager) -> FileStorage:
    return FileStorage(cache_dir, key_provider=key_manager)

@pytest.fixture
def cache(storage: FileStorage, key_manager: KeyManager) -> Cache:
    return Cache(storage, key_provider=key_manager)

@pytest.fixture
def mock_console_display(mocker):
    """Mocks the ConsoleDisplay to capture output easily.
    Patches the ConsoleDisplay where main.py uses it.
    """
    mock = mocker.MagicMock(spec=ConsoleDisplay)
    mocker.patch('vaultcache.main.ConsoleDisplay', return_value=mock)
    return mock

@pytest.fixture
def quiet_logging(mocker):
    """Stops the CLI from reconfiguring the root logger during tests."""
    return mocker.patch('vaultcache.main.setup_logging')
