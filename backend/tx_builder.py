import base64
from typing import Callable, List, Optional, TypeVar

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID
from spl.token.instructions import (
    InitializeMintParams,
    MintToParams,
    TransferParams,
    initialize_mint,
    mint_to,
    transfer as spl_transfer,
)

from errors import InstructionConstructionFailure

SYS_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
SYSVAR_RENT_PUBKEY = Pubkey.from_string("SysvarRent111111111111111111111111111111111")

SYSTEM_TRANSFER_TAG = 2
MAX_DECIMALS = 255
U64_MAX = 2**64 - 1

P = TypeVar("P")


def derive_token_account(owner: Pubkey, mint: Pubkey, token_program_id: Pubkey = TOKEN_PROGRAM_ID) -> Pubkey:
    """Associated token account of `owner` for `mint`, as the ATA program derives it."""
    return Pubkey.find_program_address(
        [bytes(owner), bytes(token_program_id), bytes(mint)], ASSOCIATED_TOKEN_PROGRAM_ID
    )[0]


def _build_spl(builder: Callable[[P], Instruction], params: P) -> Instruction:
    try:
        return builder(params)
    except Exception as exc:  # noqa: BLE001
        raise InstructionConstructionFailure(f"Failed to build instruction: {exc}") from exc


def _check_u64(value: int, name: str) -> None:
    if not 0 <= value <= U64_MAX:
        raise InstructionConstructionFailure(f"Failed to build instruction: {name} out of u64 range")


def build_initialize_mint_ix(
    mint: Pubkey,
    mint_authority: Pubkey,
    decimals: int,
    freeze_authority: Optional[Pubkey] = None,
) -> Instruction:
    # Accounts: mint (writable), rent sysvar (readonly).
    if not 0 <= decimals <= MAX_DECIMALS:
        raise InstructionConstructionFailure(
            f"Failed to build instruction: decimals must be between 0 and {MAX_DECIMALS}, got {decimals}"
        )
    return _build_spl(
        initialize_mint,
        InitializeMintParams(
            decimals=decimals,
            program_id=TOKEN_PROGRAM_ID,
            mint=mint,
            mint_authority=mint_authority,
            freeze_authority=freeze_authority,
        ),
    )


def build_mint_to_ix(mint: Pubkey, destination_owner: Pubkey, authority: Pubkey, amount: int) -> Instruction:
    # Tokens land in the owner's associated token account, never the owner address itself.
    _check_u64(amount, "amount")
    dest_ata = derive_token_account(destination_owner, mint)
    return _build_spl(
        mint_to,
        MintToParams(
            program_id=TOKEN_PROGRAM_ID,
            mint=mint,
            dest=dest_ata,
            mint_authority=authority,
            amount=amount,
            signers=[],
        ),
    )


def build_token_transfer_ix(owner: Pubkey, destination_owner: Pubkey, mint: Pubkey, amount: int) -> Instruction:
    _check_u64(amount, "amount")
    source_ata = derive_token_account(owner, mint)
    dest_ata = derive_token_account(destination_owner, mint)
    return _build_spl(
        spl_transfer,
        TransferParams(
            program_id=TOKEN_PROGRAM_ID,
            source=source_ata,
            dest=dest_ata,
            owner=owner,
            amount=amount,
            signers=[],
        ),
    )


def build_system_transfer_ix(sender: Pubkey, recipient: Pubkey, lamports: int) -> Instruction:
    # SystemProgram transfer: instruction = 2 (u32 LE) + lamports (u64 LE)
    _check_u64(lamports, "lamports")
    data = SYSTEM_TRANSFER_TAG.to_bytes(4, "little") + lamports.to_bytes(8, "little")
    accounts = [
        AccountMeta(pubkey=sender, is_signer=True, is_writable=True),
        AccountMeta(pubkey=recipient, is_signer=False, is_writable=True),
    ]
    return Instruction(program_id=SYS_PROGRAM_ID, data=data, accounts=accounts)


def encode_instruction_data(data: bytes) -> str:
    return base64.b64encode(data).decode()


def instruction_to_dict(ix: Instruction) -> dict:
    return {
        "program_id": str(ix.program_id),
        "accounts": [
            {
                "pubkey": str(k.pubkey),
                "is_signer": k.is_signer,
                "is_writable": k.is_writable,
            }
            for k in ix.accounts
        ],
        "instruction_data": encode_instruction_data(bytes(ix.data)),
    }


def account_addresses(ix: Instruction) -> List[str]:
    return [str(k.pubkey) for k in ix.accounts]
