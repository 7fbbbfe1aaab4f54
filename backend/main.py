from __future__ import annotations

import logging
import uuid
from typing import List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic_settings import BaseSettings
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from errors import ServiceError
from keys import encode_secret, generate_keypair
from rate_limiting import GeneralRateLimitMiddleware, RateLimiter
from schemas import (
    CreateTokenRequest,
    InstructionMeta,
    KeyMeta,
    KeypairData,
    MintTokenRequest,
    SendSolRequest,
    SendTokenRequest,
    SignMessageData,
    SignMessageRequest,
    SolTransferData,
    SuccessResponse,
    TokenKeyMeta,
    TokenTransferData,
    VerifyMessageData,
    VerifyMessageRequest,
)
from signatures import encode_signature, sign_message, verify_message
from tx_builder import (
    account_addresses,
    build_initialize_mint_ix,
    build_mint_to_ix,
    build_system_transfer_ix,
    build_token_transfer_ix,
    encode_instruction_data,
    instruction_to_dict,
)
from validation import (
    SIGNATURE_ENCODING,
    validate_create_token,
    validate_mint_token,
    validate_send_sol,
    validate_send_token,
    validate_sign,
    validate_verify,
)


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    cors_origins: str = "*"  # comma-separated
    rate_limit_enabled: bool = True
    rate_limit_burst: int = 5
    rate_limit_replenish_seconds: float = 10.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger("solana_ix")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


app = FastAPI(title="Solana Instruction Server", version="0.1.0")
app.state.rate_limiter = RateLimiter(
    burst=settings.rate_limit_burst,
    replenish_seconds=settings.rate_limit_replenish_seconds,
)

# Last added runs first: CORS answers preflights before anything else.
if settings.rate_limit_enabled:
    app.add_middleware(GeneralRateLimitMiddleware, limiter=app.state.rate_limiter)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.info("request_rejected kind=%s path=%s", exc.kind, request.url.path)
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
    else:
        detail = "malformed JSON"
    logger.info("request_rejected kind=RequestValidationError path=%s", request.url.path)
    return error_response(400, f"Invalid request body: {detail}")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    error_id = str(uuid.uuid4())
    logger.error(
        "unexpected_error id=%s path=%s type=%s",
        error_id,
        request.url.path,
        type(exc).__name__,
        exc_info=exc,
    )
    return error_response(500, f"Internal server error (id {error_id})")


@app.on_event("startup")
def startup_event():
    logger.info(
        "server_start host=%s port=%s rate_limit=%s",
        settings.host,
        settings.port,
        settings.rate_limit_enabled,
    )


@app.get("/health", response_model=SuccessResponse[str])
def health():
    return SuccessResponse[str](data="Server is running")


@app.post("/keypair", response_model=SuccessResponse[KeypairData])
def create_keypair():
    kp = generate_keypair()
    return SuccessResponse[KeypairData](data=KeypairData(pubkey=str(kp.pubkey()), secret=encode_secret(kp)))


@app.post("/message/sign", response_model=SuccessResponse[SignMessageData])
def message_sign(req: SignMessageRequest):
    cmd = validate_sign(req.message, req.secret)
    sig = sign_message(cmd.message.encode("utf-8"), cmd.keypair)
    return SuccessResponse[SignMessageData](
        data=SignMessageData(
            signature=encode_signature(sig, SIGNATURE_ENCODING),
            public_key=str(cmd.keypair.pubkey()),
            message=cmd.message,
        )
    )


@app.post("/message/verify", response_model=SuccessResponse[VerifyMessageData])
def message_verify(req: VerifyMessageRequest):
    cmd = validate_verify(req.message, req.signature, req.pubkey)
    valid = verify_message(cmd.message.encode("utf-8"), cmd.signature, cmd.pubkey)
    return SuccessResponse[VerifyMessageData](
        data=VerifyMessageData(valid=valid, message=cmd.message, pubkey=cmd.pubkey_text)
    )


def wrap_instruction_meta(raw: dict) -> InstructionMeta:
    return InstructionMeta(
        program_id=raw["program_id"],
        accounts=[KeyMeta(**k) for k in raw["accounts"]],
        instruction_data=raw["instruction_data"],
    )


@app.post("/token/create", response_model=SuccessResponse[InstructionMeta])
def token_create(req: CreateTokenRequest):
    cmd = validate_create_token(req.mint_authority, req.mint, req.decimals, req.freeze_authority)
    ix = build_initialize_mint_ix(cmd.mint, cmd.mint_authority, cmd.decimals, cmd.freeze_authority)
    return SuccessResponse[InstructionMeta](data=wrap_instruction_meta(instruction_to_dict(ix)))


@app.post("/token/mint", response_model=SuccessResponse[InstructionMeta])
def token_mint(req: MintTokenRequest):
    cmd = validate_mint_token(req.mint, req.destination, req.authority, req.amount)
    ix = build_mint_to_ix(cmd.mint, cmd.destination, cmd.authority, cmd.amount)
    return SuccessResponse[InstructionMeta](data=wrap_instruction_meta(instruction_to_dict(ix)))


@app.post("/send/sol", response_model=SuccessResponse[SolTransferData])
def send_sol(req: SendSolRequest):
    cmd = validate_send_sol(req.from_, req.to, req.lamports)
    ix = build_system_transfer_ix(cmd.sender, cmd.recipient, cmd.lamports)
    return SuccessResponse[SolTransferData](
        data=SolTransferData(
            program_id=str(ix.program_id),
            accounts=account_addresses(ix),
            instruction_data=encode_instruction_data(bytes(ix.data)),
        )
    )


@app.post("/send/token", response_model=SuccessResponse[TokenTransferData])
def send_token(req: SendTokenRequest):
    cmd = validate_send_token(req.destination, req.mint, req.owner, req.amount)
    ix = build_token_transfer_ix(cmd.owner, cmd.destination, cmd.mint, cmd.amount)
    return SuccessResponse[TokenTransferData](
        data=TokenTransferData(
            program_id=str(ix.program_id),
            accounts=[TokenKeyMeta(pubkey=str(k.pubkey), is_signer=k.is_signer) for k in ix.accounts],
            instruction_data=encode_instruction_data(bytes(ix.data)),
        )
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
