import base64

import base58
import pytest

from errors import InvalidEncoding, InvalidSignature
from signatures import (
    BASE58,
    BASE64,
    b64decode,
    decode_signature,
    encode_signature,
    sign_message,
    verify_message,
)


def flip_bit(data: bytes, index: int, bit: int = 0) -> bytes:
    out = bytearray(data)
    out[index] ^= 1 << bit
    return bytes(out)


class TestSignVerify:
    @pytest.mark.parametrize("message", [b"hello", b"x", "Hello, Solana!".encode(), bytes(range(256))])
    def test_round_trip(self, keypair, message):
        sig = sign_message(message, keypair)
        assert len(sig) == 64
        assert verify_message(message, sig, keypair.pubkey()) is True

    def test_signing_is_deterministic(self, keypair):
        assert sign_message(b"hello", keypair) == sign_message(b"hello", keypair)

    @pytest.mark.parametrize("index", [0, 2, 4])
    def test_flipped_message_bit_fails(self, keypair, index):
        message = b"hello"
        sig = sign_message(message, keypair)
        assert verify_message(flip_bit(message, index), sig, keypair.pubkey()) is False

    @pytest.mark.parametrize("index", [0, 31, 32, 63])
    def test_flipped_signature_bit_fails(self, keypair, index):
        sig = sign_message(b"hello", keypair)
        assert verify_message(b"hello", flip_bit(sig, index), keypair.pubkey()) is False

    def test_other_address_fails(self, keypair, make_keypair):
        sig = sign_message(b"hello", keypair)
        assert verify_message(b"hello", sig, make_keypair(99).pubkey()) is False

    def test_all_zero_signature_is_invalid_not_an_error(self, keypair):
        assert verify_message(b"hello", bytes(64), keypair.pubkey()) is False


class TestSignatureCodec:
    @pytest.mark.parametrize("encoding", [BASE58, BASE64])
    def test_round_trip(self, keypair, encoding):
        sig = sign_message(b"hello", keypair)
        assert decode_signature(encode_signature(sig, encoding), encoding) == sig

    def test_base64_text_form(self, keypair):
        sig = sign_message(b"hello", keypair)
        assert encode_signature(sig, BASE64) == base64.b64encode(sig).decode()

    @pytest.mark.parametrize("size", [63, 65])
    def test_wrong_length_rejected_base58(self, size):
        with pytest.raises(InvalidSignature):
            decode_signature(base58.b58encode(bytes([5]) * size).decode(), BASE58)

    @pytest.mark.parametrize("size", [63, 65])
    def test_wrong_length_rejected_base64(self, size):
        with pytest.raises(InvalidSignature):
            decode_signature(base64.b64encode(bytes([5]) * size).decode(), BASE64)

    def test_exactly_64_bytes_accepted(self):
        raw = bytes([5]) * 64
        assert decode_signature(base58.b58encode(raw).decode(), BASE58) == raw
        assert decode_signature(base64.b64encode(raw).decode(), BASE64) == raw

    @pytest.mark.parametrize(
        "text,encoding",
        [("not-base58!!", BASE58), ("%%%%", BASE64), ("abc", BASE64)],
    )
    def test_bad_alphabet_rejected(self, text, encoding):
        with pytest.raises(InvalidSignature):
            decode_signature(text, encoding)

    def test_alphabet_is_not_negotiated(self, keypair):
        # A base64 signature containing '+' or '/' never decodes as base58.
        sig = bytes([0xFB]) * 64
        text = base64.b64encode(sig).decode()
        assert "+" in text or "/" in text
        with pytest.raises(InvalidSignature):
            decode_signature(text, BASE58)

    def test_unknown_encoding(self):
        with pytest.raises(ValueError):
            encode_signature(bytes(64), "hex")


def test_low_level_base64_decode_raises_encoding_error():
    with pytest.raises(InvalidEncoding):
        b64decode("not base64!")
