import pytest

from message_transmitter.errors import (
    ErrorCode,
    MathError,
    MathErrorCode,
    MessageTransmitterError,
    ProgramError,
)


def test_codes_are_contiguous():
    errors = [MessageTransmitterError(code) for code in ErrorCode]
    values = [int(error.code) for error in errors]
    first = values[0]
    assert values == list(range(first, first + len(errors)))
    assert len(errors) == 32
    assert errors[0].name == "INVALID_AUTHORITY"
    assert str(errors[0]) == "Invalid authority"
    assert str(errors[-1]) == "Invalid message hash"


def test_custom_codes_start_at_anchor_offset():
    transmitter_error = MessageTransmitterError(ErrorCode.INVALID_AUTHORITY)
    math_error = MathError(MathErrorCode.MATH_OVERFLOW)
    assert int(transmitter_error.code) == 6000
    assert int(math_error.code) == 6000
    assert str(math_error) == "Overflow in arithmetic operation"


@pytest.mark.parametrize(
    "code, text",
    [
        (ErrorCode.NONCE_ALREADY_USED, "Nonce already used"),
        (ErrorCode.PROGRAM_PAUSED, "Instruction is not allowed at this time"),
        (ErrorCode.INVALID_SIGNATURE_S_VALUE, "Invalid signature S value"),
    ],
)
def test_messages(code, text):
    error = MessageTransmitterError(code)
    assert str(error) == text
    assert error.code is code
    assert error.name == code.name


def test_math_error_message():
    error = MathError(MathErrorCode.MATH_UNDERFLOW)
    assert str(error) == "Underflow in arithmetic operation"


def test_errors_share_base_class():
    error = MathError(MathErrorCode.ERROR_IN_DIVISION)
    assert isinstance(error, ProgramError)
    assert error.code is MathErrorCode.ERROR_IN_DIVISION
    assert str(error) == "Error in division operation"
    assert error.name == "ERROR_IN_DIVISION"


def test_wrong_code_family_rejected():
    with pytest.raises(TypeError):
        MessageTransmitterError(MathErrorCode.MATH_OVERFLOW)
    with pytest.raises(TypeError):
        MathError(ErrorCode.INVALID_NONCE)