"""Public keys, base58 and program derived addresses."""

import hashlib

_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {char: index for index, char in enumerate(_ALPHABET)}

MAX_SEEDS = 16
MAX_SEED_LEN = 32
PDA_MARKER = b"ProgramDerivedAddress"

_P = 2**255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P


def b58encode(data):
    """Encode bytes as base58 text."""
    data = bytes(data)
    number = int.from_bytes(data, "big")
    chars = []
    while number:
        number, rem = divmod(number, 58)
        chars.append(_ALPHABET[rem])
    zeros = len(data) - len(data.lstrip(b"\x00"))
    return "1" * zeros + "".join(reversed(chars))


def b58decode(text):
    """Decode base58 text into bytes."""
    number = 0
    for char in text:
        try:
            number = number * 58 + _INDEX[char]
        except KeyError:
            raise ValueError(f"invalid base58 character {char!r}") from None
    zeros = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return b"\x00" * zeros + body


class Pubkey(bytes):
    """A 32-byte account address."""

    LENGTH = 32

    def __new__(cls, value=b"\x00" * 32):
        if isinstance(value, int):
            raise TypeError("Pubkey needs bytes, not an integer")
        data = bytes(value)
        if len(data) != cls.LENGTH:
            raise ValueError(f"a public key is {cls.LENGTH} bytes, got {len(data)}")
        return super().__new__(cls, data)

    @classmethod
    def from_base58(cls, text):
        return cls(b58decode(text))

    @classmethod
    def default(cls):
        return cls(b"\x00" * cls.LENGTH)

    def is_on_curve(self):
        """Whether the bytes decompress to a point on the ed25519 curve."""
        y = int.from_bytes(self, "little") & ((1 << 255) - 1)
        y %= _P
        y2 = y * y % _P
        u = (y2 - 1) % _P
        v = (_D * y2 + 1) % _P
        x2 = u * pow(v, _P - 2, _P) % _P
        return x2 == 0 or pow(x2, (_P - 1) // 2, _P) == 1

    def __str__(self):
        return b58encode(self)

    def __repr__(self):
        return f"Pubkey('{self}')"


PROGRAM_ID = Pubkey.from_base58("CCTPmbSD7gX1bxKPAmg77w8oFzNFpaQiQUWD43TKaecd")


def _check_seeds(seeds, max_count):
    if len(seeds) > max_count:
        raise ValueError("too many seeds")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise ValueError("seed is longer than the maximum seed length")


def create_program_address(seeds, program_id):
    """Derive an address from seeds; it must lie off the curve."""
    seeds = [bytes(seed) for seed in seeds]
    _check_seeds(seeds, MAX_SEEDS)
    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(bytes(Pubkey(program_id)))
    hasher.update(PDA_MARKER)
    address = Pubkey(hasher.digest())
    if address.is_on_curve():
        raise ValueError("invalid seeds, address must fall off the curve")
    return address


def find_program_address(seeds, program_id):
    """Return the first off-curve address and its bump, trying bumps from 255 down."""
    seeds = [bytes(seed) for seed in seeds]
    _check_seeds(seeds, MAX_SEEDS - 1)
    for bump in range(255, 0, -1):
        try:
            return create_program_address([*seeds, bytes([bump])], program_id), bump
        except ValueError:
            continue
    raise ValueError("unable to find a viable program address bump seed")