"""
Per-endpoint request validation.

Checks run in a fixed order and the first failure wins:

1. every required field is present and non-blank,
2. amounts are positive and fit in a u64,
3. addresses, secrets and signatures decode to the right byte lengths.

Each `validate_*` returns a frozen command holding the decoded values, so the
builders and signer only ever see well-formed input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from errors import InvalidAmount, MissingField, NonPositiveAmount
from keys import decode_address, decode_keypair
from signatures import BASE58, decode_signature
from tx_builder import U64_MAX

SIGNATURE_ENCODING = BASE58


@dataclass(frozen=True)
class SignCommand:
    message: str
    keypair: Keypair


@dataclass(frozen=True)
class VerifyCommand:
    message: str
    signature: bytes
    pubkey: Pubkey
    pubkey_text: str


@dataclass(frozen=True)
class CreateTokenCommand:
    mint: Pubkey
    mint_authority: Pubkey
    decimals: int
    freeze_authority: Optional[Pubkey] = None


@dataclass(frozen=True)
class MintTokenCommand:
    mint: Pubkey
    destination: Pubkey
    authority: Pubkey
    amount: int


@dataclass(frozen=True)
class SendSolCommand:
    sender: Pubkey
    recipient: Pubkey
    lamports: int


@dataclass(frozen=True)
class SendTokenCommand:
    destination: Pubkey
    mint: Pubkey
    owner: Pubkey
    amount: int


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require(*values: Any) -> None:
    if any(is_blank(v) for v in values):
        raise MissingField()


def require_message(message: Optional[str]) -> None:
    # Whitespace is a legitimate message to sign; only absent/empty is missing.
    if message is None or message == "":
        raise MissingField()


def check_amount(value: Any, name: str = "Amount") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer")
    if value <= 0:
        raise NonPositiveAmount(f"{name} must be greater than 0")
    if value > U64_MAX:
        raise InvalidAmount(f"{name} exceeds the maximum u64 value")
    return value


def validate_sign(message: Optional[str], secret: Optional[str]) -> SignCommand:
    require_message(message)
    require(secret)
    return SignCommand(message=message, keypair=decode_keypair(secret))


def validate_verify(message: Optional[str], signature: Optional[str], pubkey: Optional[str]) -> VerifyCommand:
    require_message(message)
    require(signature, pubkey)
    address = decode_address(pubkey, "public key")
    raw_sig = decode_signature(signature, SIGNATURE_ENCODING)
    return VerifyCommand(message=message, signature=raw_sig, pubkey=address, pubkey_text=pubkey)


def validate_create_token(
    mint_authority: Optional[str],
    mint: Optional[str],
    decimals: Optional[int],
    freeze_authority: Optional[str] = None,
) -> CreateTokenCommand:
    require(mint_authority, mint, decimals)
    mint_pk = decode_address(mint, "mint address")
    authority_pk = decode_address(mint_authority, "mint authority address")
    freeze_pk = None
    if not is_blank(freeze_authority):
        freeze_pk = decode_address(freeze_authority, "freeze authority address")
    return CreateTokenCommand(
        mint=mint_pk,
        mint_authority=authority_pk,
        decimals=decimals,
        freeze_authority=freeze_pk,
    )


def validate_mint_token(
    mint: Optional[str],
    destination: Optional[str],
    authority: Optional[str],
    amount: Optional[int],
) -> MintTokenCommand:
    require(mint, destination, authority, amount)
    amount = check_amount(amount)
    return MintTokenCommand(
        mint=decode_address(mint, "mint address"),
        destination=decode_address(destination, "destination address"),
        authority=decode_address(authority, "authority address"),
        amount=amount,
    )


def validate_send_sol(sender: Optional[str], recipient: Optional[str], lamports: Optional[int]) -> SendSolCommand:
    require(sender, recipient, lamports)
    lamports = check_amount(lamports, "Lamports")
    return SendSolCommand(
        sender=decode_address(sender, "sender address"),
        recipient=decode_address(recipient, "recipient address"),
        lamports=lamports,
    )


def validate_send_token(
    destination: Optional[str],
    mint: Optional[str],
    owner: Optional[str],
    amount: Optional[int],
) -> SendTokenCommand:
    require(destination, mint, owner, amount)
    amount = check_amount(amount)
    return SendTokenCommand(
        mint=decode_address(mint, "mint address"),
        destination=decode_address(destination, "destination address"),
        owner=decode_address(owner, "owner address"),
        amount=amount,
    )
