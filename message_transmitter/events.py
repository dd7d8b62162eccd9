"""Events emitted by the program and the sent-message account."""

from dataclasses import dataclass
from typing import ClassVar

from . import utils
from .message import Message
from .pubkey import Pubkey


@dataclass(frozen=True)
class OwnershipTransferStarted:
    previous_owner: Pubkey
    new_owner: Pubkey


@dataclass(frozen=True)
class OwnershipTransferred:
    previous_owner: Pubkey
    new_owner: Pubkey


@dataclass(frozen=True)
class PauserChanged:
    new_address: Pubkey


@dataclass(frozen=True)
class AttesterManagerUpdated:
    previous_attester_manager: Pubkey
    new_attester_manager: Pubkey


@dataclass
class MessageSent:
    """Account holding a sent message and who paid for its storage."""

    rent_payer: Pubkey
    message: bytes = b""

    # rent payer, vector length prefix and one byte of vector content
    INIT_SPACE: ClassVar[int] = 32 + 4 + 1

    @staticmethod
    def space(message_body_len):
        """Account size needed for a message with a body of the given length."""
        return utils.checked_add(
            utils.checked_sub(
                utils.checked_add(utils.DISCRIMINATOR_SIZE, MessageSent.INIT_SPACE), 1
            ),
            Message.serialized_len(message_body_len),
        )


@dataclass(frozen=True)
class MessageReceived:
    caller: Pubkey
    source_domain: int
    nonce: int
    sender: Pubkey
    message_body: bytes


@dataclass(frozen=True)
class SignatureThresholdUpdated:
    old_signature_threshold: int
    new_signature_threshold: int


@dataclass(frozen=True)
class AttesterEnabled:
    attester: Pubkey


@dataclass(frozen=True)
class AttesterDisabled:
    attester: Pubkey


@dataclass(frozen=True)
class MaxMessageBodySizeUpdated:
    new_max_message_body_size: int


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Unpause:
    pass