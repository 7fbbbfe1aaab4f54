from __future__ import annotations

import base64
import binascii

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.signature import Signature

from errors import InvalidEncoding, InvalidSignature
from keys import b58decode

SIGNATURE_LENGTH = 64
BASE58 = "base58"
BASE64 = "base64"
ENCODINGS = (BASE58, BASE64)


def b64decode(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise InvalidEncoding(f"not valid base64: {exc}") from exc


def encode_signature(sig: bytes, encoding: str = BASE58) -> str:
    if len(sig) != SIGNATURE_LENGTH:
        raise ValueError(f"signature must be {SIGNATURE_LENGTH} bytes, got {len(sig)}")
    if encoding == BASE58:
        return base58.b58encode(sig).decode()
    if encoding == BASE64:
        return base64.b64encode(sig).decode()
    raise ValueError(f"Unsupported signature encoding {encoding}")


def decode_signature(text: str, encoding: str = BASE58) -> bytes:
    if encoding not in ENCODINGS:
        raise ValueError(f"Unsupported signature encoding {encoding}")
    try:
        raw = b58decode(text) if encoding == BASE58 else b64decode(text)
    except InvalidEncoding as exc:
        raise InvalidSignature(f"Invalid signature: {exc}") from exc
    if len(raw) != SIGNATURE_LENGTH:
        raise InvalidSignature(f"Invalid signature length: expected {SIGNATURE_LENGTH} bytes, got {len(raw)}")
    return raw


def sign_message(message: bytes, keypair: Keypair) -> bytes:
    return bytes(keypair.sign_message(message))


def verify_message(message: bytes, signature: bytes, address: Pubkey) -> bool:
    """Strict Ed25519 verification; a bad signature is `False`, never an error."""
    try:
        return Signature.from_bytes(signature).verify(address, message)
    except ValueError:
        return False
