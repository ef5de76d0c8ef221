from typing import List, NamedTuple

from nacl.bindings import crypto_sign, crypto_sign_seed_keypair
from tonsdk.crypto import mnemonic_is_valid, mnemonic_new, mnemonic_to_wallet_key

SIGNATURE_LENGTH = 64


class KeyPair(NamedTuple):
    public_key: bytes
    secret_key: bytes  # 32-byte seed followed by the public key


def generate_mnemonic(words_count: int = 24) -> List[str]:
    return mnemonic_new(words_count)


def validate_mnemonic(mnemonic: List[str]) -> bool:
    return mnemonic_is_valid(list(mnemonic))


def key_pair_from_mnemonic(mnemonic: List[str]) -> KeyPair:
    public_key, secret_key = mnemonic_to_wallet_key(list(mnemonic))
    return KeyPair(bytes(public_key), bytes(secret_key))


def key_pair_from_seed(seed: bytes) -> KeyPair:
    public_key, secret_key = crypto_sign_seed_keypair(seed)
    return KeyPair(bytes(public_key), bytes(secret_key))


def key_pair_from_secret_key(secret_key: bytes) -> KeyPair:
    if len(secret_key) not in (32, 64):
        raise ValueError(f"Secret key should be 32 or 64 bytes, got {len(secret_key)}")

    key_pair = key_pair_from_seed(secret_key[:32])
    if len(secret_key) == 64 and key_pair.public_key != secret_key[32:]:
        raise ValueError("Secret key does not match its public key part")
    return key_pair


def sign(message: bytes, secret_key: bytes) -> bytes:
    return crypto_sign(message, secret_key)[:SIGNATURE_LENGTH]
