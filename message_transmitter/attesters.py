"""Attester management instructions."""

from .errors import ErrorCode, MessageTransmitterError
from .events import AttesterDisabled, AttesterEnabled, SignatureThresholdUpdated
from .pubkey import Pubkey


def _require_attester_manager(state, attester_manager):
    if state.attester_manager != attester_manager:
        raise MessageTransmitterError(ErrorCode.INVALID_AUTHORITY)


def enable_attester(state, attester_manager, new_attester):
    """Add an attester to the enabled set."""
    _require_attester_manager(state, attester_manager)
    if new_attester == Pubkey.default():
        raise MessageTransmitterError(ErrorCode.INVALID_ATTESTER)
    if state.is_enabled_attester(new_attester):
        raise MessageTransmitterError(ErrorCode.ATTESTER_ALREADY_ENABLED)
    state.enabled_attesters.append(Pubkey(new_attester))
    return AttesterEnabled(attester=Pubkey(new_attester))


def disable_attester(state, attester_manager, attester):
    """Remove an attester from the enabled set."""
    _require_attester_manager(state, attester_manager)
    count = len(state.enabled_attesters)
    if count <= 1:
        raise MessageTransmitterError(ErrorCode.TOO_FEW_ENABLED_ATTESTERS)
    if count <= state.signature_threshold:
        raise MessageTransmitterError(ErrorCode.SIGNATURE_THRESHOLD_TOO_LOW)
    try:
        state.enabled_attesters.remove(attester)
    except ValueError:
        raise MessageTransmitterError(ErrorCode.ATTESTER_ALREADY_DISABLED) from None
    return AttesterDisabled(attester=Pubkey(attester))


def set_signature_threshold(state, attester_manager, new_signature_threshold):
    """Change how many attester signatures a message needs."""
    _require_attester_manager(state, attester_manager)
    if new_signature_threshold <= 0:
        raise MessageTransmitterError(ErrorCode.INVALID_SIGNATURE_THRESHOLD)
    if len(state.enabled_attesters) < new_signature_threshold:
        raise MessageTransmitterError(ErrorCode.INVALID_SIGNATURE_THRESHOLD)
    if state.signature_threshold == new_signature_threshold:
        raise MessageTransmitterError(ErrorCode.SIGNATURE_THRESHOLD_ALREADY_SET)
    old_signature_threshold = state.signature_threshold
    state.signature_threshold = new_signature_threshold
    return SignatureThresholdUpdated(
        old_signature_threshold=old_signature_threshold,
        new_signature_threshold=new_signature_threshold,
    )