import dataclasses

import pytest

from vaultcache.infrastructure.config.security import SecurityConfig

def test_defaults():
    config = SecurityConfig.from_environment()
    assert config.encryption_enabled is True
    assert config.algorithm == "aes-256-cbc"
    assert config.file_permissions == 0o600
    assert config.directory_permissions == 0o700

def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("CACHE_ENCRYPTION_ENABLED", "false")
    monkeypatch.setenv("CACHE_ENCRYPTION_ALGORITHM", "AES-128-GCM")
    monkeypatch.setenv("CACHE_FILE_PERMISSIONS", "640")
    monkeypatch.setenv("CACHE_DIR_PERMISSIONS", "0750")

    config = SecurityConfig.from_environment()

    assert config.encryption_enabled is False
    assert config.algorithm == "aes-128-gcm"
    assert config.file_permissions == 0o640
    assert config.directory_permissions == 0o750

def test_invalid_permissions_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("CACHE_FILE_PERMISSIONS", "999")
    config = SecurityConfig.from_environment()
    assert config.file_permissions == 0o600

def test_snapshot_is_immutable():
    config = SecurityConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.encryption_enabled = False

def test_derived_copies_leave_original_untouched():
    config = SecurityConfig()
    plain = config.without_encryption()
    gcm = config.with_algorithm(" AES-256-GCM ")

    assert config.encryption_enabled is True
    assert plain.encryption_enabled is False
    assert plain.algorithm == config.algorithm
    assert gcm.algorithm == "aes-256-gcm"
    assert config.algorithm == "aes-256-cbc"
