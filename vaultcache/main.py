"""Main entry point for the vaultcache command line tool.

Sets up the Typer CLI application, performs dependency injection (Composition
Root), defines CLI commands, and delegates execution to the CommandHandler.
This is the only place where default instances of the storage, key manager
and cache are created.
"""

import logging
from pathlib import Path
from typing import Annotated, Any, Dict, Optional

import typer

# --- Core Layer ---
from vaultcache.core.cache import Cache
from vaultcache.core.command_handler import CommandHandler

# --- Domain Layer ---
from vaultcache.domain.events.cache_events import DomainEvent
from vaultcache.domain.exceptions import CacheStorageError, InvalidCachePrefixError

# --- Infrastructure Layer ---
# Config
from vaultcache.infrastructure.config.settings import (
    get_cache_dir,
    get_cache_prefix,
    get_config,
    is_cache_enabled,
    load_configuration,
)
# UI
from vaultcache.infrastructure.cli.display import ConsoleDisplay
# Crypto
from vaultcache.infrastructure.crypto.key_manager import KeyManager
# Storage
from vaultcache.infrastructure.storage.file_storage import FileStorage
# Monitoring
from vaultcache.infrastructure.monitoring.logger_setup import (
    DEFAULT_LOG_FORMAT,
    level_from_name,
    setup_logging,
)

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("vaultcache.audit")

def log_event(event: DomainEvent) -> None:
    """Event listener wired into the cache: records security-relevant events."""
    audit_logger.warning(f"{type(event).__name__}: {event}")

# --- Dependency Injection Container (Manual) ---

def create_dependencies(cache_dir: Optional[Path] = None, prefix: Optional[str] = None) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.

    Args:
        cache_dir: Cache root; CACHE_PATH (or ~/.vaultcache/cache) when None.
        prefix: Key namespace; CACHE_PREFIX when None.

    Raises:
        CacheStorageError: If the cache directory is unusable.
        InvalidCachePrefixError: If the prefix contains path separators or "..".
    """
    # 1. Load Configuration First
    load_configuration()
    setup_logging(
        log_level=level_from_name(get_config('logging_level'), logging.WARNING),
        log_file=get_config('logging_file'),
        log_format=str(get_config('logging_format', DEFAULT_LOG_FORMAT)),
    )
    logger.info("Configuration and logging initialized.")

    # 2. Instantiate Infrastructure Adapters
    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['key_manager'] = KeyManager()
    dependencies['storage'] = FileStorage(
        cache_dir or get_cache_dir(),
        key_provider=dependencies['key_manager'],
        on_event=log_event,
    )

    # 3. Core Services
    dependencies['cache'] = Cache(
        dependencies['storage'],
        enabled=is_cache_enabled(),
        prefix=get_cache_prefix() if prefix is None else prefix,
        key_provider=dependencies['key_manager'],
        on_event=log_event,
    )
    dependencies['command_handler'] = CommandHandler(
        cache=dependencies['cache'],
        ui=dependencies['ui'],
    )
    logger.info("All dependencies initialized successfully.")
    return dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="vaultcache",
    help="vaultcache: file-backed TTL cache with optional AES encryption.",
    add_completion=False,
)

def _get_handler(ctx: typer.Context) -> CommandHandler:
    """Builds the dependencies on first use within one CLI invocation."""
    state: Dict[str, Any] = ctx.ensure_object(dict)
    if 'command_handler' not in state:
        try:
            state.update(create_dependencies(state.get('path'), state.get('prefix')))
        except (CacheStorageError, InvalidCachePrefixError) as e:
            logger.error(f"Fatal Error during application initialization: {e}")
            ConsoleDisplay().display_error(f"Cache initialization failed: {e}")
            raise typer.Exit(code=1)
    return state['command_handler']

def _finish(ok: bool) -> None:
    if not ok:
        raise typer.Exit(code=1)

# --- CLI Commands ---

KeyArgument = Annotated[str, typer.Argument(help="Cache key (max 250 bytes, no control characters).")]

@app.callback()
def main_callback(
    ctx: typer.Context,
    path: Annotated[
        Optional[Path],
        typer.Option("--path", help="Cache directory. Defaults to CACHE_PATH or ~/.vaultcache/cache.")
    ] = None,
    prefix: Annotated[
        Optional[str],
        typer.Option("--prefix", help="Key namespace. Defaults to CACHE_PREFIX.")
    ] = None,
):
    """Inspect and manage a vaultcache directory."""
    ctx.ensure_object(dict).update({'path': path, 'prefix': prefix})

@app.command(name="generate-key")
def generate_key_command():
    """Print a new random key for CACHE_ENCRYPTION_KEY."""
    # Needs no cache directory, so skip the full dependency graph
    ConsoleDisplay().display_output(KeyManager.generate_key())

@app.command()
def get(ctx: typer.Context, key: KeyArgument):
    """Print a cached value. Exits with 1 on a miss."""
    _finish(_get_handler(ctx).handle_get(key))

@app.command(name="set")
def set_command(
    ctx: typer.Context,
    key: KeyArgument,
    value: Annotated[str, typer.Argument(help="Value to cache (stored as a string).")],
    ttl: Annotated[int, typer.Option("--ttl", "-t", help="Time to live in seconds.")] = 60,
    override: Annotated[bool, typer.Option("--override", help="Replace an existing entry.")] = False,
):
    """Cache a value."""
    _finish(_get_handler(ctx).handle_set(key, value, ttl, override))

@app.command()
def delete(ctx: typer.Context, key: KeyArgument):
    """Remove a cached value."""
    _finish(_get_handler(ctx).handle_delete(key))

@app.command()
def flush(ctx: typer.Context):
    """Remove every entry under the current prefix (all entries without one)."""
    _finish(_get_handler(ctx).handle_flush())

@app.command(name="ttl")
def ttl_command(
    ctx: typer.Context,
    key: KeyArgument,
    seconds: Annotated[int, typer.Argument(help="New TTL, counted from the entry's creation time.")],
):
    """Change the TTL of a cached entry."""
    _finish(_get_handler(ctx).handle_set_ttl(key, seconds))

@app.command()
def inspect(ctx: typer.Context, key: KeyArgument):
    """Show the metadata of a cached entry."""
    _finish(_get_handler(ctx).handle_inspect(key))

# --- Main Execution Guard ---

def cli_entry_point():
    """Function called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
