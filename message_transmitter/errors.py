"""Error codes and exceptions raised by the message transmitter."""

from enum import IntEnum


class _CodedEnum(IntEnum):
    """Integer error code that carries a human readable message."""

    def __new__(cls, value, message):
        obj = int.__new__(cls, value)
        obj._value_ = value
        obj.message = message
        return obj


class ErrorCode(_CodedEnum):
    INVALID_AUTHORITY = (6000, "Invalid authority")
    PROGRAM_PAUSED = (6001, "Instruction is not allowed at this time")
    INVALID_MESSAGE_TRANSMITTER_STATE = (6002, "Invalid message transmitter state")
    INVALID_SIGNATURE_THRESHOLD = (6003, "Invalid signature threshold")
    SIGNATURE_THRESHOLD_ALREADY_SET = (6004, "Signature threshold already set")
    INVALID_OWNER = (6005, "Invalid owner")
    INVALID_PAUSER = (6006, "Invalid pauser")
    INVALID_ATTESTER_MANAGER = (6007, "Invalid attester manager")
    INVALID_ATTESTER = (6008, "Invalid attester")
    ATTESTER_ALREADY_ENABLED = (6009, "Attester already enabled")
    TOO_FEW_ENABLED_ATTESTERS = (6010, "Too few enabled attesters")
    SIGNATURE_THRESHOLD_TOO_LOW = (6011, "Signature threshold is too low")
    ATTESTER_ALREADY_DISABLED = (6012, "Attester already disabled")
    MESSAGE_BODY_LIMIT_EXCEEDED = (6013, "Message body exceeds max size")
    INVALID_DESTINATION_CALLER = (6014, "Invalid destination caller")
    INVALID_RECIPIENT = (6015, "Invalid message recipient")
    SENDER_NOT_PERMITTED = (6016, "Sender is not permitted")
    INVALID_SOURCE_DOMAIN = (6017, "Invalid source domain")
    INVALID_DESTINATION_DOMAIN = (6018, "Invalid destination domain")
    INVALID_MESSAGE_VERSION = (6019, "Invalid message version")
    INVALID_USED_NONCES_ACCOUNT = (6020, "Invalid used nonces account")
    INVALID_RECIPIENT_PROGRAM = (6021, "Invalid recipient program")
    INVALID_NONCE = (6022, "Invalid nonce")
    NONCE_ALREADY_USED = (6023, "Nonce already used")
    MESSAGE_TOO_SHORT = (6024, "Message is too short")
    MALFORMED_MESSAGE = (6025, "Malformed message")
    INVALID_SIGNATURE_ORDER_OR_DUPE = (6026, "Invalid signature order or dupe")
    INVALID_ATTESTER_SIGNATURE = (6027, "Invalid attester signature")
    INVALID_ATTESTATION_LENGTH = (6028, "Invalid attestation length")
    INVALID_SIGNATURE_RECOVERY_ID = (6029, "Invalid signature recovery ID")
    INVALID_SIGNATURE_S_VALUE = (6030, "Invalid signature S value")
    INVALID_MESSAGE_HASH = (6031, "Invalid message hash")


class MathErrorCode(_CodedEnum):
    MATH_OVERFLOW = (6000, "Overflow in arithmetic operation")
    MATH_UNDERFLOW = (6001, "Underflow in arithmetic operation")
    ERROR_IN_DIVISION = (6002, "Error in division operation")


class ProgramError(Exception):
    """Base class of every error the program reports."""

    codes = (ErrorCode, MathErrorCode)

    def __init__(self, code):
        if not isinstance(code, self.codes):
            raise TypeError(f"{type(self).__name__} does not accept {code!r}")
        super().__init__(code.message)
        self.code = code

    @property
    def name(self):
        return self.code.name


class MessageTransmitterError(ProgramError):
    """A check of the message transmitter failed."""

    codes = (ErrorCode,)


class MathError(ProgramError):
    """Checked arithmetic failed."""

    codes = (MathErrorCode,)