"""Symmetric ciphers for encryption at rest.

Algorithms are named the way OpenSSL names them (``aes-256-cbc``). Every
algorithm produces the same token layout: ``base64(iv || ciphertext)``, with
an IV whose length depends on the mode. Keys longer than the algorithm needs
are truncated, so one 256-bit master key serves every key size.
"""

import base64
import binascii
import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from vaultcache.domain.exceptions import DecryptionFailedError, EncryptionFailedError
from vaultcache.domain.models.common import CipherToken

logger = logging.getLogger(__name__)

AES_BLOCK_BITS = 128


@dataclass(frozen=True)
class CipherSpec:
    """How one named algorithm encrypts and decrypts."""
    name: str
    key_length: int
    iv_length: int
    encrypt: Callable[[bytes, bytes, bytes], bytes]  # (key, iv, plaintext) -> ciphertext
    decrypt: Callable[[bytes, bytes, bytes], bytes]  # (key, iv, ciphertext) -> plaintext


def _cbc_encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    padder = padding.PKCS7(AES_BLOCK_BITS).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    return encryptor.update(padded) + encryptor.finalize()

def _cbc_decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(AES_BLOCK_BITS).unpadder()
    return unpadder.update(padded) + unpadder.finalize()

def _ctr_encrypt(key: bytes, iv: bytes, data: bytes) -> bytes:
    cipher = Cipher(algorithms.AES(key), modes.CTR(iv)).encryptor()
    return cipher.update(data) + cipher.finalize()

def _ctr_decrypt(key: bytes, iv: bytes, data: bytes) -> bytes:
    cipher = Cipher(algorithms.AES(key), modes.CTR(iv)).decryptor()
    return cipher.update(data) + cipher.finalize()

def _gcm_encrypt(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    # The 16-byte tag is appended to the ciphertext.
    return AESGCM(key).encrypt(iv, plaintext, None)

def _gcm_decrypt(key: bytes, iv: bytes, ciphertext: bytes) -> bytes:
    return AESGCM(key).decrypt(iv, ciphertext, None)


def _build_registry() -> Dict[str, CipherSpec]:
    registry: Dict[str, CipherSpec] = {}
    for bits in (128, 192, 256):
        key_length = bits // 8
        registry[f"aes-{bits}-cbc"] = CipherSpec(f"aes-{bits}-cbc", key_length, 16, _cbc_encrypt, _cbc_decrypt)
        registry[f"aes-{bits}-ctr"] = CipherSpec(f"aes-{bits}-ctr", key_length, 16, _ctr_encrypt, _ctr_decrypt)
        registry[f"aes-{bits}-gcm"] = CipherSpec(f"aes-{bits}-gcm", key_length, 12, _gcm_encrypt, _gcm_decrypt)
    return registry

SUPPORTED_ALGORITHMS: Dict[str, CipherSpec] = _build_registry()


def get_cipher(algorithm: str) -> CipherSpec:
    """Looks up an algorithm by name (case-insensitive).

    Raises:
        KeyError: If the algorithm is not supported.
    """
    return SUPPORTED_ALGORITHMS[algorithm.strip().lower()]

def iv_length(algorithm: str) -> int:
    return get_cipher(algorithm).iv_length

def encrypt(algorithm: str, key: bytes, plaintext: bytes) -> CipherToken:
    """Encrypts plaintext with a fresh random IV.

    Returns:
        ASCII bytes of base64(iv || ciphertext).

    Raises:
        EncryptionFailedError: For unknown algorithms or short keys.
    """
    try:
        spec = get_cipher(algorithm)
    except KeyError as e:
        raise EncryptionFailedError(f"Unsupported encryption algorithm: '{algorithm}'") from e
    if len(key) < spec.key_length:
        raise EncryptionFailedError(f"Key too short for {spec.name}: {len(key)} bytes")

    iv = os.urandom(spec.iv_length)
    try:
        ciphertext = spec.encrypt(key[:spec.key_length], iv, plaintext)
    except ValueError as e:
        raise EncryptionFailedError(f"Encryption error: {e}") from e
    return CipherToken(base64.b64encode(iv + ciphertext))

def decrypt(algorithm: str, key: bytes, token: bytes) -> bytes:
    """Reverses encrypt().

    Raises:
        DecryptionFailedError: On bad base64, truncated data, wrong key,
            bad padding or authentication tag, or an unknown algorithm.
    """
    try:
        spec = get_cipher(algorithm)
    except KeyError as e:
        raise DecryptionFailedError(f"Unsupported encryption algorithm: '{algorithm}'") from e

    try:
        raw = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionFailedError("Invalid base64 encoded data") from e

    if len(raw) < spec.iv_length:
        raise DecryptionFailedError("Invalid encrypted data format")

    iv, ciphertext = raw[:spec.iv_length], raw[spec.iv_length:]
    try:
        return spec.decrypt(key[:spec.key_length], iv, ciphertext)
    except (ValueError, InvalidTag) as e:
        raise DecryptionFailedError("Decryption failed") from e
