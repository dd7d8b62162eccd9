import copy

import pytest

from message_transmitter.errors import ErrorCode, MessageTransmitterError
from message_transmitter.events import (
    AttesterDisabled,
    AttesterEnabled,
    MessageReceived,
    Pause,
    SignatureThresholdUpdated,
)
from message_transmitter.message import Message
from message_transmitter.program import MessageTransmitterProgram
from message_transmitter.pubkey import PROGRAM_ID, Pubkey
from message_transmitter.state import MessageTransmitter, attester_address, sign_attestation
from message_transmitter.utils import instruction_discriminator

OWNER = Pubkey(bytes([1]) * 32)
MANAGER = Pubkey(bytes([2]) * 32)
PAUSER = Pubkey(bytes([3]) * 32)
PAYER = Pubkey(bytes([4]) * 32)
SENDER = Pubkey(bytes([5]) * 32)
RECEIVER = Pubkey(bytes([6]) * 32)
CALLER = Pubkey(bytes([7]) * 32)
LOCAL_DOMAIN = 5
REMOTE_DOMAIN = 0
KEYS = [11, 12]


def make_program():
    state = MessageTransmitter(
        owner=OWNER,
        attester_manager=MANAGER,
        pauser=PAUSER,
        local_domain=LOCAL_DOMAIN,
        version=0,
        signature_threshold=1,
        enabled_attesters=[attester_address(k) for k in KEYS],
        max_message_body_size=1000,
        next_available_nonce=1,
    )
    return MessageTransmitterProgram(state)


def attest(message_bytes, keys=(KEYS[0],)):
    digest = Message(0, message_bytes).hash()
    ordered = sorted(keys, key=attester_address)
    return b"".join(sign_attestation(k, digest) for k in ordered)


def incoming(nonce=1, body=b"hello", caller=Pubkey.default()):
    return Message.format_message(
        0, REMOTE_DOMAIN, LOCAL_DOMAIN, nonce, SENDER, RECEIVER, caller, body
    )


def test_send_message_assigns_nonces():
    program = make_program()
    nonce, sent = program.send_message(PAYER, SENDER, 3, RECEIVER, b"body")
    assert nonce == 1
    assert program.state.next_available_nonce == 2
    parsed = Message(0, sent.message)
    assert parsed.source_domain() == LOCAL_DOMAIN
    assert parsed.destination_domain() == 3
    assert parsed.sender() == SENDER
    assert parsed.message_body() == b"body"
    assert sent.rent_payer == PAYER


def test_receive_message_delivers_and_records_nonce():
    program = make_program()
    delivered = []
    program.register_receiver(RECEIVER, delivered.append)
    message = incoming()
    result = program.receive_message(CALLER, RECEIVER, message, attest(message))
    assert len(delivered) == 1
    assert delivered[0].program_id == RECEIVER
    assert delivered[0].data.startswith(instruction_discriminator("handle_receive_message"))
    assert delivered[0].accounts[0].is_signer is True
    assert program.is_nonce_used(1, REMOTE_DOMAIN) is True
    assert program.is_nonce_used(2, REMOTE_DOMAIN) is False
    assert program.events[-1] == result.event
    assert isinstance(result.event, MessageReceived)
    assert result.event.message_body == b"hello"


def test_receive_same_nonce_twice_fails():
    program = make_program()
    program.register_receiver(RECEIVER, lambda instruction: None)
    message = incoming()
    program.receive_message(CALLER, RECEIVER, message, attest(message))
    with pytest.raises(MessageTransmitterError) as info:
        program.receive_message(CALLER, RECEIVER, message, attest(message))
    assert info.value.code == ErrorCode.NONCE_ALREADY_USED


def test_unregistered_receiver_rejected():
    program = make_program()
    message = incoming()
    with pytest.raises(ValueError):
        program.receive_message(CALLER, RECEIVER, message, attest(message))


def test_receiver_cannot_be_program():
    program = make_program()
    with pytest.raises(ValueError):
        program.register_receiver(PROGRAM_ID, lambda instruction: None)


def test_failing_handler_leaves_nonce_unused():
    program = make_program()

    def failing(instruction):
        raise RuntimeError("receiver failed")

    program.register_receiver(RECEIVER, failing)
    message = incoming()
    with pytest.raises(RuntimeError):
        program.receive_message(CALLER, RECEIVER, message, attest(message))
    assert program.is_nonce_used(1, REMOTE_DOMAIN) is False
    assert program.events == []

    program.register_receiver(RECEIVER, lambda instruction: None)
    program.receive_message(CALLER, RECEIVER, message, attest(message))
    assert program.is_nonce_used(1, REMOTE_DOMAIN) is True


def test_destination_caller_enforced():
    program = make_program()
    program.register_receiver(RECEIVER, lambda instruction: None)
    message = incoming(caller=CALLER)
    with pytest.raises(MessageTransmitterError) as info:
        program.receive_message(PAYER, RECEIVER, message, attest(message))
    assert info.value.code == ErrorCode.INVALID_DESTINATION_CALLER


def test_pause_blocks_sending():
    program = make_program()
    assert program.pause(PAUSER) == Pause()
    assert program.events == [Pause()]
    with pytest.raises(MessageTransmitterError) as info:
        program.send_message(PAYER, SENDER, 3, RECEIVER, b"body")
    assert info.value.code == ErrorCode.PROGRAM_PAUSED
    assert program.state.next_available_nonce == 1


def test_failed_instruction_keeps_state():
    program = make_program()
    before = copy.deepcopy(program.state)
    with pytest.raises(MessageTransmitterError) as info:
        program.transfer_ownership(PAUSER, CALLER)
    assert info.value.code == ErrorCode.INVALID_AUTHORITY
    assert program.state == before
    assert program.events == []


def test_ownership_two_step():
    program = make_program()
    program.transfer_ownership(OWNER, CALLER)
    assert program.state.pending_owner == CALLER
    program.accept_ownership(CALLER)
    assert program.state.owner == CALLER
    assert program.state.pending_owner == Pubkey.default()


def test_attester_management():
    program = make_program()
    third = attester_address(13)
    assert program.enable_attester(MANAGER, third) == AttesterEnabled(attester=third)
    assert program.set_signature_threshold(MANAGER, 2) == SignatureThresholdUpdated(1, 2)
    assert program.disable_attester(MANAGER, third) == AttesterDisabled(attester=third)
    assert third not in program.state.enabled_attesters
    with pytest.raises(MessageTransmitterError) as info:
        program.disable_attester(MANAGER, attester_address(KEYS[0]))
    assert info.value.code == ErrorCode.SIGNATURE_THRESHOLD_TOO_LOW


def test_nonce_pda_shared_within_range():
    program = make_program()
    first = program.get_nonce_pda(1, REMOTE_DOMAIN)
    assert program.get_nonce_pda(6400, REMOTE_DOMAIN) == first
    assert program.get_nonce_pda(6401, REMOTE_DOMAIN) != first
    assert program.get_nonce_pda(1, 1) != first


def test_replace_message_keeps_nonce():
    program = make_program()
    nonce, sent = program.send_message(PAYER, SENDER, 3, RECEIVER, b"old")
    new_nonce, replaced = program.replace_message(
        PAYER, SENDER, sent.message, attest(sent.message), b"new", CALLER
    )
    assert new_nonce == nonce
    assert program.state.next_available_nonce == 2
    parsed = Message(0, replaced.message)
    assert parsed.message_body() == b"new"
    assert parsed.destination_caller() == CALLER


def test_reclaim_event_account():
    program = make_program()
    _nonce, sent = program.send_message(PAYER, SENDER, 3, RECEIVER, b"body")
    assert program.reclaim_event_account(PAYER, sent, attest(sent.message)) == PAYER
    with pytest.raises(MessageTransmitterError) as info:
        program.reclaim_event_account(PAYER, sent, b"")
    assert info.value.code == ErrorCode.INVALID_ATTESTATION_LENGTH