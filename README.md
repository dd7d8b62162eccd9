# message_transmitter

An in-memory model of a cross-chain message transmitter. It formats and parses
transfer messages, verifies multi-signature secp256k1 attestations from enabled
attesters, records used nonces in fixed-size bitsets, derives program
addresses, and enforces the administrative rules for the owner, pauser and
attester manager.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `message_transmitter.message` — `Message` validates message bytes (at least
  116 bytes, expected version) and reads the header fields: `version()`,
  `source_domain()`, `destination_domain()`, `nonce()`, `sender()`,
  `recipient()`, `destination_caller()` and `message_body()`.
  `Message.format_message(...)` builds message bytes and `Message.hash()`
  returns their Keccak-256 digest.
- `message_transmitter.state` — `MessageTransmitter` is the transmitter state
  (owner, pending owner, pauser, attester manager, paused flag, local domain,
  version, signature threshold, enabled attesters, maximum body size, next
  nonce). `verify_attestation_signatures(message_hash, attestation)` checks an
  attestation: exactly `signature_threshold` 65-byte signatures (`r || s || v`,
  `v` from 27 to 30, low `s`), signed by enabled attesters in strictly
  increasing address order. `UsedNonces` is a bitset of 6400 nonces per
  account with `use_nonce`, `is_nonce_used`, `first_nonce_for`, and
  `to_bytes`/`from_bytes` for its account data. Helper functions
  `recover_attester`, `attester_address` and `sign_attestation` work with
  attester keys and signatures.
- `message_transmitter.pubkey` — `Pubkey` is a 32-byte address shown in
  base58; `b58encode`, `b58decode`, `create_program_address`,
  `find_program_address` and `PROGRAM_ID`.
- `message_transmitter.admin` — `transfer_ownership`, `accept_ownership`,
  `update_pauser`, `update_attester_manager`, `pause`, `unpause`,
  `set_max_message_body_size`.
- `message_transmitter.attesters` — `enable_attester`, `disable_attester`,
  `set_signature_threshold`.
- `message_transmitter.messaging` — `send_message`, `send_message_with_caller`,
  `replace_message`, `receive_message` and `reclaim_event_account`, plus the
  `HandleReceiveMessageParams`, `AccountMeta`, `CpiInstruction` and
  `ReceiveResult` records that receiving produces.
- `message_transmitter.nonces` — `used_nonces_seeds`, `get_nonce_pda` and
  `is_nonce_used` for used-nonce accounts.
- `message_transmitter.events` — the event dataclasses each instruction
  returns, and the `MessageSent` account with `MessageSent.space(...)`.
- `message_transmitter.program` — `MessageTransmitterProgram` runs every
  instruction against one state. Each instruction is all-or-nothing: if it
  raises, the state is restored. Events from admin, attester and receive
  instructions are appended to `program.events`, and used-nonce accounts are
  kept per derived address.

## Errors

Failed checks raise `message_transmitter.errors.MessageTransmitterError` and
arithmetic overflow, underflow or division by zero raises
`message_transmitter.errors.MathError`. Both subclass `ProgramError` and carry
a `code` (`ErrorCode` or `MathErrorCode`) whose `message` describes the
failure. Account-level problems — a receiver that is not registered or is the
transmitter itself, a payee that is not the original rent payer, malformed
used-nonce account data, or a used-nonce account with the wrong owner — raise
`ValueError`.

## Example

```python
import hashlib

from message_transmitter.message import Message
from message_transmitter.program import MessageTransmitterProgram
from message_transmitter.pubkey import Pubkey
from message_transmitter.state import MessageTransmitter, attester_address, sign_attestation

attester_key = hashlib.sha256(b"secret").digest()
owner = Pubkey(bytes([1]) * 32)
sender = Pubkey(bytes([2]) * 32)
receiver = Pubkey(bytes([3]) * 32)
caller = Pubkey(bytes([4]) * 32)

state = MessageTransmitter(
    owner=owner,
    attester_manager=owner,
    pauser=owner,
    local_domain=5,
    version=0,
    signature_threshold=1,
    enabled_attesters=[attester_address(attester_key)],
    max_message_body_size=1024,
    next_available_nonce=1,
)
program = MessageTransmitterProgram(state)

# sending assigns the next nonce and builds the sent-message account
nonce, sent = program.send_message(owner, sender, 0, receiver, b"hello")
assert nonce == 1
assert Message(0, sent.message).message_body() == b"hello"

# receiving a message attested by an enabled attester
raw = Message.format_message(0, 3, 5, 7, sender, receiver, Pubkey.default(), b"hi")
attestation = sign_attestation(attester_key, Message(0, raw).hash())
delivered = []
program.register_receiver(receiver, delivered.append)
program.receive_message(caller, receiver, raw, attestation)
assert program.is_nonce_used(7, 3)
assert delivered[0].program_id == receiver
```

## What this package does not do

Everything runs in memory within one Python process. There is no command-line
tool, no network client or server, and no persistent storage: state, used-nonce
accounts and events live only as long as the objects that hold them. Receiving
programs are Python callables registered with `register_receiver`; they are
handed the built `CpiInstruction` and nothing is sent anywhere else.