from __future__ import annotations


class ServiceError(Exception):
    """Client-input failure reported back verbatim as a 400."""

    kind = "ServiceError"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class MissingField(ServiceError):
    kind = "MissingField"

    def __init__(self, message: str = "Missing required fields"):
        super().__init__(message)


class InvalidEncoding(ServiceError):
    kind = "InvalidEncoding"


class InvalidLength(ServiceError):
    kind = "InvalidLength"


class InvalidAddress(ServiceError):
    kind = "InvalidAddress"


class InvalidKeyMaterial(ServiceError):
    kind = "InvalidKeyMaterial"


class InvalidSignature(ServiceError):
    kind = "InvalidSignature"


class NonPositiveAmount(ServiceError):
    kind = "NonPositiveAmount"


class InvalidAmount(ServiceError):
    kind = "InvalidAmount"


class InstructionConstructionFailure(ServiceError):
    kind = "InstructionConstructionFailure"
