"""
Base58 address and keypair codecs.

Addresses are 32-byte Ed25519 public keys; secrets are the 64-byte
(seed || public key) bundle produced by `solana-keygen` and wallets.
"""

from __future__ import annotations

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from errors import InvalidAddress, InvalidEncoding, InvalidKeyMaterial, InvalidLength

PUBKEY_LENGTH = 32
KEYPAIR_LENGTH = 64
# Text length bounds for a base58 encoded 32-byte value.
MIN_ADDRESS_CHARS = 32
MAX_ADDRESS_CHARS = 44


def b58decode(text: str) -> bytes:
    # base58 tolerates trailing whitespace; addresses and secrets must not.
    if text != text.strip():
        raise InvalidEncoding("not valid base58: surrounding whitespace")
    try:
        return base58.b58decode(text)
    except ValueError as exc:
        raise InvalidEncoding(f"not valid base58: {exc}") from exc


def decode_address(text: str, label: str = "public key") -> Pubkey:
    if not MIN_ADDRESS_CHARS <= len(text) <= MAX_ADDRESS_CHARS:
        raise InvalidAddress(
            f"Invalid {label}: expected {MIN_ADDRESS_CHARS}-{MAX_ADDRESS_CHARS} base58 characters, got {len(text)}"
        )
    try:
        raw = b58decode(text)
    except InvalidEncoding as exc:
        raise InvalidAddress(f"Invalid {label}: not valid base58") from exc
    if len(raw) != PUBKEY_LENGTH:
        raise InvalidAddress(f"Invalid {label}: expected {PUBKEY_LENGTH} bytes, got {len(raw)}")
    return Pubkey.from_bytes(raw)


def decode_keypair(text: str) -> Keypair:
    """Rebuild a keypair from its base58 64-byte secret.

    The byte length is checked before reconstruction so a truncated secret is
    reported as `InvalidLength` rather than a key format problem.
    """
    try:
        raw = b58decode(text)
    except InvalidEncoding as exc:
        raise InvalidKeyMaterial("Invalid secret key: not valid base58") from exc
    if len(raw) != KEYPAIR_LENGTH:
        raise InvalidLength(f"Invalid keypair length: expected {KEYPAIR_LENGTH} bytes, got {len(raw)}")
    try:
        derived = Keypair.from_seed(raw[:PUBKEY_LENGTH])
    except Exception as exc:  # noqa: BLE001
        raise InvalidKeyMaterial(f"Failed to create keypair: {exc}") from exc
    if bytes(derived.pubkey()) != raw[PUBKEY_LENGTH:]:
        raise InvalidKeyMaterial("Failed to create keypair: public key does not match secret key")
    return derived


def generate_keypair() -> Keypair:
    return Keypair()


def encode_secret(keypair: Keypair) -> str:
    return base58.b58encode(bytes(keypair)).decode()
