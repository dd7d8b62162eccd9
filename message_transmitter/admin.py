"""Ownership, pauser, attester manager, pause and size-limit instructions."""

from .errors import ErrorCode, MessageTransmitterError
from .events import (
    AttesterManagerUpdated,
    MaxMessageBodySizeUpdated,
    OwnershipTransferred,
    OwnershipTransferStarted,
    Pause,
    PauserChanged,
    Unpause,
)
from .pubkey import Pubkey


def _require(condition, code):
    if not condition:
        raise MessageTransmitterError(code)


def _require_authority(expected, signer):
    _require(expected == signer, ErrorCode.INVALID_AUTHORITY)


def transfer_ownership(state, owner, new_owner):
    """Start a two-step ownership transfer by recording a pending owner."""
    _require_authority(state.owner, owner)
    if new_owner in (Pubkey.default(), owner, state.pending_owner):
        raise MessageTransmitterError(ErrorCode.INVALID_OWNER)
    state.pending_owner = Pubkey(new_owner)
    return OwnershipTransferStarted(
        previous_owner=state.owner, new_owner=state.pending_owner
    )


def accept_ownership(state, pending_owner):
    """Complete an ownership transfer; the pending owner becomes the owner."""
    _require_authority(state.pending_owner, pending_owner)
    previous_owner = state.owner
    state.owner = state.pending_owner
    state.pending_owner = Pubkey.default()
    return OwnershipTransferred(previous_owner=previous_owner, new_owner=state.owner)


def update_pauser(state, owner, new_pauser):
    """Replace the account allowed to pause and unpause."""
    _require_authority(state.owner, owner)
    _require(new_pauser != Pubkey.default(), ErrorCode.INVALID_PAUSER)
    _require(new_pauser != state.pauser, ErrorCode.INVALID_PAUSER)
    state.pauser = Pubkey(new_pauser)
    return PauserChanged(new_address=state.pauser)


def update_attester_manager(state, owner, new_attester_manager):
    """Replace the account that manages attesters."""
    _require_authority(state.owner, owner)
    _require(
        new_attester_manager != Pubkey.default(), ErrorCode.INVALID_ATTESTER_MANAGER
    )
    _require(
        new_attester_manager != state.attester_manager,
        ErrorCode.INVALID_ATTESTER_MANAGER,
    )
    previous_attester_manager = state.attester_manager
    state.attester_manager = Pubkey(new_attester_manager)
    return AttesterManagerUpdated(
        previous_attester_manager=previous_attester_manager,
        new_attester_manager=state.attester_manager,
    )


def pause(state, pauser):
    """Pause the transmitter."""
    _require_authority(state.pauser, pauser)
    _require(not state.paused, ErrorCode.INVALID_MESSAGE_TRANSMITTER_STATE)
    state.paused = True
    return Pause()


def unpause(state, pauser):
    """Resume the transmitter."""
    _require_authority(state.pauser, pauser)
    _require(state.paused, ErrorCode.INVALID_MESSAGE_TRANSMITTER_STATE)
    state.paused = False
    return Unpause()


def set_max_message_body_size(state, owner, new_max_message_body_size):
    """Set the largest message body that may be sent."""
    _require_authority(state.owner, owner)
    if not 0 <= new_max_message_body_size < 1 << 64:
        raise ValueError("maximum message body size must be a 64-bit unsigned integer")
    state.max_message_body_size = new_max_message_body_size
    return MaxMessageBodySizeUpdated(
        new_max_message_body_size=state.max_message_body_size
    )