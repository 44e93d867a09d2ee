import base64

import pytest

from vaultcache.domain.exceptions import DecryptionFailedError, EncryptionFailedError
from vaultcache.infrastructure.crypto import ciphers

KEY = bytes(range(32))
OTHER_KEY = bytes(range(1, 33))

@pytest.mark.parametrize("algorithm", sorted(ciphers.SUPPORTED_ALGORITHMS))
def test_every_algorithm_decrypts_what_it_encrypts(algorithm):
    plaintext = b"the quick brown fox"
    token = ciphers.encrypt(algorithm, KEY, plaintext)

    assert plaintext not in base64.b64decode(token)
    assert ciphers.decrypt(algorithm, KEY, token) == plaintext

def test_token_starts_with_iv_of_algorithm_length():
    token = ciphers.encrypt("aes-256-gcm", KEY, b"x")
    raw = base64.b64decode(token)
    # 12-byte nonce, 1 byte of ciphertext, 16-byte tag
    assert len(raw) == 12 + 1 + 16

def test_same_plaintext_encrypts_differently_each_time():
    first = ciphers.encrypt("aes-256-cbc", KEY, b"repeat")
    second = ciphers.encrypt("aes-256-cbc", KEY, b"repeat")
    assert first != second

def test_algorithm_names_are_case_insensitive():
    token = ciphers.encrypt("AES-256-CBC", KEY, b"data")
    assert ciphers.decrypt("aes-256-cbc", KEY, token) == b"data"

def test_iv_length():
    assert ciphers.iv_length("aes-128-cbc") == 16
    assert ciphers.iv_length("aes-256-ctr") == 16
    assert ciphers.iv_length("aes-192-gcm") == 12

def test_unknown_algorithm_on_encrypt():
    with pytest.raises(EncryptionFailedError, match="Unsupported encryption algorithm"):
        ciphers.encrypt("des-ede3", KEY, b"data")

def test_unknown_algorithm_on_decrypt():
    with pytest.raises(DecryptionFailedError):
        ciphers.decrypt("rot13", KEY, b"AAAA")

def test_short_key_is_rejected():
    with pytest.raises(EncryptionFailedError, match="Key too short"):
        ciphers.encrypt("aes-256-cbc", b"short", b"data")

def test_get_cipher_raises_key_error_for_unknown_name():
    with pytest.raises(KeyError):
        ciphers.get_cipher("aes-256-xts")

def test_decrypt_rejects_invalid_base64():
    with pytest.raises(DecryptionFailedError, match="Invalid base64"):
        ciphers.decrypt("aes-256-cbc", KEY, b"not base64!!")

def test_decrypt_rejects_data_shorter_than_iv():
    with pytest.raises(DecryptionFailedError, match="Invalid encrypted data format"):
        ciphers.decrypt("aes-256-cbc", KEY, base64.b64encode(b"tiny"))

def test_decrypt_with_wrong_key_fails_authentication():
    token = ciphers.encrypt("aes-256-gcm", KEY, b"secret")
    with pytest.raises(DecryptionFailedError):
        ciphers.decrypt("aes-256-gcm", OTHER_KEY, token)

def test_tampered_gcm_token_is_rejected():
    raw = bytearray(base64.b64decode(ciphers.encrypt("aes-256-gcm", KEY, b"secret")))
    raw[-1] ^= 0x01
    with pytest.raises(DecryptionFailedError):
        ciphers.decrypt("aes-256-gcm", KEY, base64.b64encode(bytes(raw)))

def test_longer_key_is_truncated_for_smaller_key_sizes():
    token = ciphers.encrypt("aes-128-cbc", KEY, b"data")
    assert ciphers.decrypt("aes-128-cbc", KEY[:16], token) == b"data"
