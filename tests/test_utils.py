import pytest

from message_transmitter.errors import MathError, MathErrorCode
from message_transmitter.utils import (
    DISCRIMINATOR_SIZE,
    account_discriminator,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    instruction_discriminator,
)


def test_add_at_upper_bound():
    assert checked_add(2**64 - 2, 1) == 2**64 - 1


def test_add_overflow():
    with pytest.raises(MathError) as info:
        checked_add(2**64 - 1, 1)
    assert info.value.code is MathErrorCode.MATH_OVERFLOW


def test_add_overflow_narrow_width():
    with pytest.raises(MathError) as info:
        checked_add(2**32 - 1, 1, bits=32)
    assert info.value.code is MathErrorCode.MATH_OVERFLOW


def test_sub_underflow():
    with pytest.raises(MathError) as info:
        checked_sub(0, 1)
    assert info.value.code is MathErrorCode.MATH_UNDERFLOW


def test_div_by_zero():
    with pytest.raises(MathError) as info:
        checked_div(1, 0)
    assert info.value.code is MathErrorCode.ERROR_IN_DIVISION


def test_div_floors():
    assert checked_div(7, 2) == 3


def test_mul_overflow():
    with pytest.raises(MathError) as info:
        checked_mul(2**32, 2**32)
    assert info.value.code is MathErrorCode.MATH_OVERFLOW


@pytest.mark.parametrize("a, b", [(0, 0), (5, 9), (123456789, 987654), (2**40, 2**20)])
def test_add_sub_round_trip(a, b):
    assert checked_sub(checked_add(a, b), b) == a


@pytest.mark.parametrize("a, b", [(0, 3), (5, 9), (2**20, 2**30)])
def test_mul_div_round_trip(a, b):
    assert checked_div(checked_mul(a, b), b) == a


@pytest.mark.parametrize("a, b", [(-1, 0), (0, 2**64)])
def test_operands_out_of_range(a, b):
    with pytest.raises(ValueError):
        checked_add(a, b)


def test_discriminators():
    instruction = instruction_discriminator("handle_receive_message")
    assert len(instruction) == DISCRIMINATOR_SIZE
    assert instruction == instruction_discriminator("handle_receive_message")
    assert instruction != account_discriminator("handle_receive_message")
    assert account_discriminator("MessageSent") != account_discriminator("UsedNonces")