from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictInt

T = TypeVar("T")


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class SuccessResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


# Requests. Every field is optional so an absent field reaches the validator
# and is reported as "Missing required fields" instead of a schema error.
# Integer fields are strict: JSON booleans, strings and floats are rejected.


class SignMessageRequest(BaseModel):
    message: Optional[str] = None
    secret: Optional[str] = None


class VerifyMessageRequest(BaseModel):
    message: Optional[str] = None
    signature: Optional[str] = None
    pubkey: Optional[str] = None


class CreateTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    mint_authority: Optional[str] = Field(default=None, alias="mintAuthority")
    mint: Optional[str] = None
    decimals: Optional[StrictInt] = None
    freeze_authority: Optional[str] = Field(default=None, alias="freezeAuthority")


class MintTokenRequest(BaseModel):
    mint: Optional[str] = None
    destination: Optional[str] = None
    authority: Optional[str] = None
    amount: Optional[StrictInt] = None


class SendSolRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    lamports: Optional[StrictInt] = None


class SendTokenRequest(BaseModel):
    destination: Optional[str] = None
    mint: Optional[str] = None
    owner: Optional[str] = None
    amount: Optional[StrictInt] = None


# Responses


class KeypairData(BaseModel):
    pubkey: str
    secret: str


class SignMessageData(BaseModel):
    signature: str
    public_key: str
    message: str


class VerifyMessageData(BaseModel):
    valid: bool
    message: str
    pubkey: str


class KeyMeta(BaseModel):
    pubkey: str
    is_signer: bool
    is_writable: bool


class InstructionMeta(BaseModel):
    program_id: str
    accounts: List[KeyMeta]
    instruction_data: str


class SolTransferData(BaseModel):
    program_id: str
    accounts: List[str]
    instruction_data: str


class TokenKeyMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pubkey: str
    is_signer: bool = Field(alias="isSigner")


class TokenTransferData(BaseModel):
    program_id: str
    accounts: List[TokenKeyMeta]
    instruction_data: str
