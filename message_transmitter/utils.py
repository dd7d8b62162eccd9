"""Checked unsigned arithmetic and Anchor discriminators."""

import hashlib
import logging

from .errors import MathError, MathErrorCode

logger = logging.getLogger(__name__)

DISCRIMINATOR_SIZE = 8


def _check_operands(arg1, arg2, bits):
    if bits <= 0:
        raise ValueError("bit width must be positive")
    limit = 1 << bits
    for value in (arg1, arg2):
        if not 0 <= value < limit:
            raise ValueError(f"{value} is not a {bits}-bit unsigned integer")
    return limit


def checked_add(arg1, arg2, bits=64):
    """Add two unsigned integers, raising on overflow."""
    limit = _check_operands(arg1, arg2, bits)
    result = arg1 + arg2
    if result >= limit:
        logger.error("Error: Overflow in %s + %s", arg1, arg2)
        raise MathError(MathErrorCode.MATH_OVERFLOW)
    return result


def checked_sub(arg1, arg2, bits=64):
    """Subtract two unsigned integers, raising on underflow."""
    _check_operands(arg1, arg2, bits)
    result = arg1 - arg2
    if result < 0:
        logger.error("Error: Underflow in %s - %s", arg1, arg2)
        raise MathError(MathErrorCode.MATH_UNDERFLOW)
    return result


def checked_div(arg1, arg2, bits=64):
    """Divide two unsigned integers, raising on division by zero."""
    _check_operands(arg1, arg2, bits)
    if arg2 == 0:
        logger.error("Error: Error in %s / %s", arg1, arg2)
        raise MathError(MathErrorCode.ERROR_IN_DIVISION)
    return arg1 // arg2


def checked_mul(arg1, arg2, bits=64):
    """Multiply two unsigned integers, raising on overflow."""
    limit = _check_operands(arg1, arg2, bits)
    result = arg1 * arg2
    if result >= limit:
        logger.error("Error: Overflow in %s * %s", arg1, arg2)
        raise MathError(MathErrorCode.MATH_OVERFLOW)
    return result


def _discriminator(preimage):
    return hashlib.sha256(preimage.encode()).digest()[:DISCRIMINATOR_SIZE]


def account_discriminator(name):
    """Eight-byte prefix that identifies an account type."""
    return _discriminator(f"account:{name}")


def instruction_discriminator(name):
    """Eight-byte prefix that identifies an instruction."""
    return _discriminator(f"global:{name}")