"""Program state: the transmitter account, used-nonce bitsets and attestations."""

import hashlib
import hmac
import struct
from dataclasses import dataclass, field
from typing import ClassVar

from Crypto.Hash import keccak

from . import utils
from .errors import ErrorCode, MessageTransmitterError
from .pubkey import Pubkey

# secp256k1 domain parameters
_P = 2**256 - 2**32 - 977
_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_HALF_N = _N // 2
_G = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)

SIGNATURE_LENGTH = 65


def _fail(code):
    raise MessageTransmitterError(code)


def _point_add(a, b):
    if a is None:
        return b
    if b is None:
        return a
    x1, y1 = a
    x2, y2 = b
    if x1 == x2:
        if (y1 + y2) % _P == 0:
            return None
        lam = 3 * x1 * x1 * pow(2 * y1, -1, _P) % _P
    else:
        lam = (y2 - y1) * pow(x2 - x1, -1, _P) % _P
    x3 = (lam * lam - x1 - x2) % _P
    return x3, (lam * (x1 - x3) - y1) % _P


def _point_mul(k, point):
    result = None
    addend = point
    while k:
        if k & 1:
            result = _point_add(result, addend)
        addend = _point_add(addend, addend)
        k >>= 1
    return result


def _keccak(data):
    return keccak.new(digest_bits=256, data=data).digest()


def _address_of(point):
    x, y = point
    digest = _keccak(x.to_bytes(32, "big") + y.to_bytes(32, "big"))
    return Pubkey(b"\x00" * 12 + digest[12:])


def _private_scalar(private_key):
    if isinstance(private_key, (bytes, bytearray)):
        if len(private_key) != 32:
            raise ValueError("a private key is 32 bytes")
        scalar = int.from_bytes(private_key, "big")
    else:
        scalar = int(private_key)
    if not 1 <= scalar < _N:
        raise ValueError("private key is out of range")
    return scalar


def _recover_point(digest, r, s, recovery_id):
    if r == 0 or s == 0:
        return None
    x = r + _N if recovery_id >= 2 else r
    if x >= _P:
        return None
    alpha = (pow(x, 3, _P) + 7) % _P
    y = pow(alpha, (_P + 1) // 4, _P)
    if y * y % _P != alpha:
        return None
    if (y & 1) != (recovery_id & 1):
        y = _P - y
    e = int.from_bytes(digest, "big") % _N
    r_inv = pow(r, -1, _N)
    u1 = (-e * r_inv) % _N
    u2 = s * r_inv % _N
    return _point_add(_point_mul(u1, _G), _point_mul(u2, (x, y)))


def recover_attester(message_hash, signature):
    """Recover the attester address (12 zero bytes + 20-byte address) from a signature."""
    message_hash = bytes(message_hash)
    signature = bytes(signature)
    if len(message_hash) != 32:
        _fail(ErrorCode.INVALID_MESSAGE_HASH)
    if len(signature) != SIGNATURE_LENGTH:
        _fail(ErrorCode.INVALID_ATTESTER_SIGNATURE)

    recovery_id = signature[-1]
    if not 27 <= recovery_id <= 30:
        _fail(ErrorCode.INVALID_SIGNATURE_RECOVERY_ID)

    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    if r >= _N or s >= _N:
        _fail(ErrorCode.INVALID_ATTESTER_SIGNATURE)
    # reject high-s signatures to prevent malleability
    if s > _HALF_N:
        _fail(ErrorCode.INVALID_SIGNATURE_S_VALUE)

    point = _recover_point(message_hash, r, s, recovery_id - 27)
    if point is None:
        _fail(ErrorCode.INVALID_ATTESTER_SIGNATURE)
    return _address_of(point)


def attester_address(private_key):
    """Address an attester with the given private key signs as."""
    return _address_of(_point_mul(_private_scalar(private_key), _G))


def _deterministic_nonces(scalar, digest):
    key_bytes = scalar.to_bytes(32, "big")
    hash_bytes = (int.from_bytes(digest, "big") % _N).to_bytes(32, "big")

    def mac(key, data):
        return hmac.new(key, data, hashlib.sha256).digest()

    v = b"\x01" * 32
    k = b"\x00" * 32
    k = mac(k, v + b"\x00" + key_bytes + hash_bytes)
    v = mac(k, v)
    k = mac(k, v + b"\x01" + key_bytes + hash_bytes)
    v = mac(k, v)
    while True:
        v = mac(k, v)
        candidate = int.from_bytes(v, "big")
        if 1 <= candidate < _N:
            yield candidate
        k = mac(k, v + b"\x00")
        v = mac(k, v)


def sign_attestation(private_key, message_hash):
    """Sign a 32-byte hash, returning r || s || v with low s and v in {27, 28}."""
    message_hash = bytes(message_hash)
    if len(message_hash) != 32:
        raise ValueError("message hash must be 32 bytes")
    scalar = _private_scalar(private_key)
    e = int.from_bytes(message_hash, "big") % _N
    for k in _deterministic_nonces(scalar, message_hash):
        rx, ry = _point_mul(k, _G)
        r = rx % _N
        if r == 0:
            continue
        s = pow(k, -1, _N) * (e + r * scalar) % _N
        if s == 0:
            continue
        recovery_id = (ry & 1) | (2 if rx >= _N else 0)
        if s > _HALF_N:
            s = _N - s
            recovery_id ^= 1
        return r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([27 + recovery_id])


@dataclass
class MessageTransmitter:
    """Main state of the message transmitter."""

    owner: Pubkey = field(default_factory=Pubkey.default)
    pending_owner: Pubkey = field(default_factory=Pubkey.default)
    attester_manager: Pubkey = field(default_factory=Pubkey.default)
    pauser: Pubkey = field(default_factory=Pubkey.default)
    paused: bool = False
    local_domain: int = 0
    version: int = 0
    signature_threshold: int = 0
    enabled_attesters: list = field(default_factory=list)
    max_message_body_size: int = 0
    next_available_nonce: int = 0

    ATTESTATION_SIGNATURE_LENGTH: ClassVar[int] = SIGNATURE_LENGTH
    # four keys, paused flag, three u32 fields, a one-key vector, two u64 fields
    INIT_SPACE: ClassVar[int] = 4 * 32 + 1 + 3 * 4 + (4 + 32) + 2 * 8

    def validate(self):
        """Whether the state is usable."""
        default = Pubkey.default()
        return (
            self.owner != default
            and self.attester_manager != default
            and self.pauser != default
            and self.signature_threshold != 0
            and self.signature_threshold <= len(self.enabled_attesters)
            and bool(self.enabled_attesters)
            and self.next_available_nonce > 0
        )

    def verify_attestation_signatures(self, message_hash, attestation):
        """Raise unless the attestation holds enough ordered signatures of enabled attesters."""
        attestation = bytes(attestation)
        expected = utils.checked_mul(
            self.ATTESTATION_SIGNATURE_LENGTH, self.signature_threshold
        )
        if len(attestation) != expected:
            _fail(ErrorCode.INVALID_ATTESTATION_LENGTH)

        last_attester = Pubkey.default()
        step = self.ATTESTATION_SIGNATURE_LENGTH
        for start in range(0, len(attestation), step):
            recovered = recover_attester(message_hash, attestation[start:start + step])
            if recovered <= last_attester:
                _fail(ErrorCode.INVALID_SIGNATURE_ORDER_OR_DUPE)
            if not self.is_enabled_attester(recovered):
                _fail(ErrorCode.INVALID_ATTESTER_SIGNATURE)
            last_attester = recovered

    def is_enabled_attester(self, attester):
        return attester in self.enabled_attesters


@dataclass
class UsedNonces:
    """Bitset of used nonces, starting at first_nonce, for one remote domain."""

    remote_domain: int = 0
    first_nonce: int = 0
    _bitmap: int = field(default=0, init=False, repr=False)

    MAX_NONCES: ClassVar[int] = 6400
    WORDS: ClassVar[int] = 100
    INIT_SPACE: ClassVar[int] = 4 + 8 + 100 * 8
    DISCRIMINATOR: ClassVar[bytes] = utils.account_discriminator("UsedNonces")

    @staticmethod
    def first_nonce_for(nonce):
        """First nonce of the bitset account that records the given nonce."""
        if nonce == 0:
            _fail(ErrorCode.INVALID_NONCE)
        size = UsedNonces.MAX_NONCES
        return utils.checked_add(
            utils.checked_mul(utils.checked_div(utils.checked_sub(nonce, 1), size), size),
            1,
        )

    def _bit(self, nonce):
        if not (
            nonce >= self.first_nonce
            and nonce < utils.checked_add(self.first_nonce, self.MAX_NONCES)
        ):
            _fail(ErrorCode.INVALID_NONCE)
        return 1 << utils.checked_sub(nonce, self.first_nonce)

    def use_nonce(self, nonce):
        """Mark the nonce as used; raise if it already was."""
        bit = self._bit(nonce)
        if self._bitmap & bit:
            _fail(ErrorCode.NONCE_ALREADY_USED)
        self._bitmap |= bit

    def is_nonce_used(self, nonce):
        return bool(self._bitmap & self._bit(nonce))

    @staticmethod
    def used_nonces_seed_delimiter(source_domain):
        """Seed delimiter: empty below domain 11 so older addresses stay unchanged."""
        return b"" if source_domain < 11 else b"-"

    def to_bytes(self):
        """Account data: discriminator, remote domain, first nonce, bitset words."""
        return (
            self.DISCRIMINATOR
            + struct.pack("<IQ", self.remote_domain, self.first_nonce)
            + self._bitmap.to_bytes(self.WORDS * 8, "little")
        )

    @classmethod
    def from_bytes(cls, data):
        data = bytes(data)
        size = len(cls.DISCRIMINATOR)
        if len(data) < size:
            raise ValueError("account discriminator not found")
        if data[:size] != cls.DISCRIMINATOR:
            raise ValueError("account discriminator did not match")
        body = data[size:]
        if len(body) < cls.INIT_SPACE:
            raise ValueError("account data is too short")
        remote_domain, first_nonce = struct.unpack_from("<IQ", body)
        account = cls(remote_domain, first_nonce)
        account._bitmap = int.from_bytes(body[12:cls.INIT_SPACE], "little")
        return account