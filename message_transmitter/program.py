"""The message transmitter program: its state, accounts and instructions together."""

import copy
from contextlib import contextmanager

from . import admin, attesters, messaging, nonces
from .message import Message
from .pubkey import PROGRAM_ID, Pubkey
from .state import UsedNonces


class MessageTransmitterProgram:
    """Runs instructions against one transmitter state, all-or-nothing.

    Events emitted by successful instructions are collected in ``events``.
    Programs that may receive messages are registered with a handler that is
    called with the instruction built for them.
    """

    def __init__(self, state, program_id=PROGRAM_ID):
        self.state = state
        self.program_id = Pubkey(program_id)
        self.events = []
        self._receivers = {}
        self._used_nonces = {}

    @contextmanager
    def _transaction(self):
        snapshot = copy.deepcopy(self.state)
        try:
            yield
        except BaseException:
            vars(self.state).update(vars(snapshot))
            raise

    def _run(self, instruction, *args):
        with self._transaction():
            event = instruction(self.state, *args)
        self.events.append(event)
        return event

    def register_receiver(self, program, handler):
        """Make a program able to receive messages; ``handler`` gets its instruction."""
        program = Pubkey(program)
        if program == self.program_id:
            raise ValueError("receiver cannot be the message transmitter program")
        self._receivers[program] = handler

    def transfer_ownership(self, owner, new_owner):
        return self._run(admin.transfer_ownership, owner, new_owner)

    def accept_ownership(self, pending_owner):
        return self._run(admin.accept_ownership, pending_owner)

    def update_pauser(self, owner, new_pauser):
        return self._run(admin.update_pauser, owner, new_pauser)

    def update_attester_manager(self, owner, new_attester_manager):
        return self._run(admin.update_attester_manager, owner, new_attester_manager)

    def pause(self, pauser):
        return self._run(admin.pause, pauser)

    def unpause(self, pauser):
        return self._run(admin.unpause, pauser)

    def set_max_message_body_size(self, owner, new_max_message_body_size):
        return self._run(
            admin.set_max_message_body_size, owner, new_max_message_body_size
        )

    def enable_attester(self, attester_manager, new_attester):
        return self._run(attesters.enable_attester, attester_manager, new_attester)

    def disable_attester(self, attester_manager, attester):
        return self._run(attesters.disable_attester, attester_manager, attester)

    def set_signature_threshold(self, attester_manager, new_signature_threshold):
        return self._run(
            attesters.set_signature_threshold, attester_manager, new_signature_threshold
        )

    def send_message(
        self, event_rent_payer, sender_program, destination_domain, recipient, message_body
    ):
        """Send a message; returns its nonce and the sent-message account."""
        with self._transaction():
            return messaging.send_message(
                self.state,
                event_rent_payer,
                sender_program,
                destination_domain,
                recipient,
                message_body,
            )

    def send_message_with_caller(
        self,
        event_rent_payer,
        sender_program,
        destination_domain,
        recipient,
        message_body,
        destination_caller,
    ):
        """Send a message only the given caller may receive."""
        with self._transaction():
            return messaging.send_message_with_caller(
                self.state,
                event_rent_payer,
                sender_program,
                destination_domain,
                recipient,
                message_body,
                destination_caller,
            )

    def replace_message(
        self,
        event_rent_payer,
        sender_program,
        original_message,
        original_attestation,
        new_message_body,
        new_destination_caller,
    ):
        """Resend an attested message under its original nonce."""
        with self._transaction():
            return messaging.replace_message(
                self.state,
                event_rent_payer,
                sender_program,
                original_message,
                original_attestation,
                new_message_body,
                new_destination_caller,
            )

    def receive_message(self, caller, receiver, message, attestation, remaining_accounts=()):
        """Verify and deliver a message to its registered receiver."""
        receiver = Pubkey(receiver)
        if receiver == self.program_id:
            raise ValueError("receiver cannot be the message transmitter program")
        handler = self._receivers.get(receiver)
        if handler is None:
            raise ValueError("receiver is not an executable program")

        parsed = Message(self.state.version, message)
        address = self.get_nonce_pda(parsed.nonce(), parsed.source_domain())
        existing = self._used_nonces.get(address)
        working = UsedNonces.from_bytes(existing.to_bytes()) if existing else None

        with self._transaction():
            result = messaging.receive_message(
                self.state,
                working,
                caller,
                receiver,
                message,
                attestation,
                remaining_accounts,
                self.program_id,
            )
            handler(result.instruction)

        self._used_nonces[address] = result.used_nonces
        self.events.append(result.event)
        return result

    def reclaim_event_account(self, payee, event_data, attestation):
        """Check an attested sent-message account may be closed; returns the payee."""
        with self._transaction():
            return messaging.reclaim_event_account(
                self.state, payee, event_data, attestation
            )

    def get_nonce_pda(self, nonce, source_domain):
        return nonces.get_nonce_pda(nonce, source_domain, self.program_id)

    def is_nonce_used(self, nonce, source_domain):
        account = self._used_nonces.get(self.get_nonce_pda(nonce, source_domain))
        if account is None:
            return False
        return nonces.is_nonce_used(
            account.to_bytes(), self.program_id, nonce, self.program_id
        )