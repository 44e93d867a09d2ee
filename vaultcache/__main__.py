"""Main entry point when executing vaultcache as a package.

This allows running the package using python -m vaultcache.
"""

from vaultcache.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
