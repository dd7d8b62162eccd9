"""Instructions that send, replace, receive and reclaim cross-chain messages."""

import struct
from dataclasses import dataclass
from typing import Optional, Tuple

from . import utils
from .errors import ErrorCode, MessageTransmitterError
from .events import MessageReceived, MessageSent
from .message import Message
from .pubkey import PROGRAM_ID, Pubkey, find_program_address
from .state import UsedNonces

AUTHORITY_SEED = b"message_transmitter_authority"
HANDLE_RECEIVE_MESSAGE = "handle_receive_message"


def _require(condition, code):
    if not condition:
        raise MessageTransmitterError(code)


@dataclass(frozen=True)
class HandleReceiveMessageParams:
    """Parameters handed to the receiving program."""

    remote_domain: int
    sender: Pubkey
    message_body: bytes
    authority_bump: int

    def to_bytes(self):
        """Borsh encoding of the parameters."""
        body = bytes(self.message_body)
        return b"".join(
            [
                struct.pack("<I", self.remote_domain),
                bytes(Pubkey(self.sender)),
                struct.pack("<I", len(body)),
                body,
                struct.pack("<B", self.authority_bump),
            ]
        )

    def instruction_data(self):
        """Instruction discriminator followed by the encoded parameters."""
        return utils.instruction_discriminator(HANDLE_RECEIVE_MESSAGE) + self.to_bytes()


@dataclass(frozen=True)
class AccountMeta:
    """An account passed to an instruction, with its signer and writable flags."""

    pubkey: Pubkey
    is_signer: bool = False
    is_writable: bool = False


@dataclass(frozen=True)
class CpiInstruction:
    """Instruction invoked on the receiving program."""

    program_id: Pubkey
    accounts: Tuple[AccountMeta, ...]
    data: bytes


@dataclass(frozen=True)
class ReceiveResult:
    """What receiving a message produced."""

    instruction: CpiInstruction
    event: MessageReceived
    used_nonces: UsedNonces


def send_message_helper(
    state,
    event_rent_payer,
    destination_domain,
    recipient,
    destination_caller,
    sender,
    nonce,
    message_body,
):
    """Validate and format a message; return the nonce and the sent-message account."""
    body = bytes(message_body)
    _require(not state.paused, ErrorCode.PROGRAM_PAUSED)
    _require(
        state.max_message_body_size >= len(body),
        ErrorCode.MESSAGE_BODY_LIMIT_EXCEEDED,
    )
    _require(recipient != Pubkey.default(), ErrorCode.INVALID_RECIPIENT)

    if nonce is None:
        nonce = state.next_available_nonce
        state.next_available_nonce = utils.checked_add(state.next_available_nonce, 1)

    event = MessageSent(
        rent_payer=Pubkey(event_rent_payer),
        message=Message.format_message(
            state.version,
            state.local_domain,
            destination_domain,
            nonce,
            sender,
            recipient,
            destination_caller,
            body,
        ),
    )
    return nonce, event


def send_message(
    state, event_rent_payer, sender_program, destination_domain, recipient, message_body
):
    """Send a message that any caller may receive on the destination domain."""
    return send_message_helper(
        state,
        event_rent_payer,
        destination_domain,
        recipient,
        Pubkey.default(),
        sender_program,
        None,
        message_body,
    )


def send_message_with_caller(
    state,
    event_rent_payer,
    sender_program,
    destination_domain,
    recipient,
    message_body,
    destination_caller,
):
    """Send a message that only the given caller may receive."""
    _require(
        destination_caller != Pubkey.default(), ErrorCode.INVALID_DESTINATION_CALLER
    )
    return send_message_helper(
        state,
        event_rent_payer,
        destination_domain,
        recipient,
        destination_caller,
        sender_program,
        None,
        message_body,
    )


def replace_message(
    state,
    event_rent_payer,
    sender_program,
    original_message,
    original_attestation,
    new_message_body,
    new_destination_caller,
):
    """Resend an attested message with a new body and caller under the same nonce."""
    _require(not state.paused, ErrorCode.PROGRAM_PAUSED)
    message = Message(state.version, original_message)
    state.verify_attestation_signatures(message.hash(), original_attestation)
    _require(message.sender() == sender_program, ErrorCode.SENDER_NOT_PERMITTED)
    _require(
        message.source_domain() == state.local_domain, ErrorCode.INVALID_SOURCE_DOMAIN
    )
    return send_message_helper(
        state,
        event_rent_payer,
        message.destination_domain(),
        message.recipient(),
        new_destination_caller,
        sender_program,
        message.nonce(),
        new_message_body,
    )


def receive_message(
    state,
    used_nonces,
    caller,
    receiver,
    message,
    attestation,
    remaining_accounts=(),
    program_id=PROGRAM_ID,
):
    """Verify an incoming message, record its nonce and build the receiver's instruction.

    ``used_nonces`` may be None for an account that does not exist yet.
    """
    parsed = Message(state.version, message)
    receiver = Pubkey(receiver)
    if receiver == Pubkey(program_id):
        raise ValueError("receiver cannot be the message transmitter program")
    if used_nonces is None:
        used_nonces = UsedNonces()

    _require(not state.paused, ErrorCode.PROGRAM_PAUSED)
    state.verify_attestation_signatures(parsed.hash(), attestation)
    _require(
        parsed.destination_domain() == state.local_domain,
        ErrorCode.INVALID_DESTINATION_DOMAIN,
    )

    destination_caller = parsed.destination_caller()
    if destination_caller != Pubkey.default():
        _require(destination_caller == caller, ErrorCode.INVALID_DESTINATION_CALLER)

    source_domain = parsed.source_domain()
    sender = parsed.sender()
    nonce = parsed.nonce()
    first_nonce = UsedNonces.first_nonce_for(nonce)

    if used_nonces.first_nonce == 0:
        used_nonces.remote_domain = source_domain
        used_nonces.first_nonce = first_nonce
    else:
        _require(
            used_nonces.remote_domain == source_domain,
            ErrorCode.INVALID_USED_NONCES_ACCOUNT,
        )
        _require(
            used_nonces.first_nonce == first_nonce,
            ErrorCode.INVALID_USED_NONCES_ACCOUNT,
        )

    used_nonces.use_nonce(nonce)

    _require(parsed.recipient() == receiver, ErrorCode.INVALID_RECIPIENT_PROGRAM)

    authority_pda, authority_bump = find_program_address(
        [AUTHORITY_SEED, bytes(receiver)], program_id
    )
    accounts = [AccountMeta(authority_pda, is_signer=True, is_writable=False)]
    accounts.extend(
        AccountMeta(Pubkey(account.pubkey), account.is_signer, account.is_writable)
        for account in remaining_accounts
    )

    body = parsed.message_body()
    params = HandleReceiveMessageParams(
        remote_domain=source_domain,
        sender=sender,
        message_body=body,
        authority_bump=authority_bump,
    )
    instruction = CpiInstruction(
        program_id=receiver, accounts=tuple(accounts), data=params.instruction_data()
    )
    event = MessageReceived(
        caller=Pubkey(caller),
        source_domain=source_domain,
        nonce=nonce,
        sender=sender,
        message_body=body,
    )
    return ReceiveResult(instruction=instruction, event=event, used_nonces=used_nonces)


def reclaim_event_account(state, payee, event_data: MessageSent, attestation: Optional[bytes]):
    """Check that a sent message was attested so its account can be closed.

    Returns the account that receives the reclaimed rent.
    """
    if event_data.rent_payer != payee:
        raise ValueError("payee does not match the original rent payer")
    _require(not state.paused, ErrorCode.PROGRAM_PAUSED)
    message = Message(state.version, event_data.message)
    state.verify_attestation_signatures(message.hash(), attestation)
    _require(
        message.source_domain() == state.local_domain, ErrorCode.INVALID_SOURCE_DOMAIN
    )
    return Pubkey(payee)