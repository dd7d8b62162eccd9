"""Cross-chain message wire format."""

from Crypto.Hash import keccak

from . import utils
from .errors import ErrorCode, MessageTransmitterError
from .pubkey import Pubkey


class Message:
    """A validated view over serialized message bytes."""

    VERSION_INDEX = 0
    SOURCE_DOMAIN_INDEX = 4
    DESTINATION_DOMAIN_INDEX = 8
    NONCE_INDEX = 12
    SENDER_INDEX = 20
    RECIPIENT_INDEX = 52
    DESTINATION_CALLER_INDEX = 84
    MESSAGE_BODY_INDEX = 116

    def __init__(self, expected_version, data):
        data = bytes(data)
        if len(data) < self.MESSAGE_BODY_INDEX:
            raise MessageTransmitterError(ErrorCode.MALFORMED_MESSAGE)
        self.data = data
        if self.version() != expected_version:
            raise MessageTransmitterError(ErrorCode.INVALID_MESSAGE_VERSION)

    @staticmethod
    def serialized_len(message_body_len):
        return utils.checked_add(Message.MESSAGE_BODY_INDEX, message_body_len)

    @staticmethod
    def format_message(
        version,
        local_domain,
        destination_domain,
        nonce,
        sender,
        recipient,
        destination_caller,
        message_body,
    ):
        """Serialize the given fields into message bytes."""
        body = bytes(message_body)
        Message.serialized_len(len(body))
        return b"".join(
            [
                version.to_bytes(4, "big"),
                local_domain.to_bytes(4, "big"),
                destination_domain.to_bytes(4, "big"),
                nonce.to_bytes(8, "big"),
                bytes(Pubkey(sender)),
                bytes(Pubkey(recipient)),
                bytes(Pubkey(destination_caller)),
                body,
            ]
        )

    def hash(self):
        """Keccak-256 digest of the message bytes."""
        return keccak.new(digest_bits=256, data=self.data).digest()

    def version(self):
        return self._read_integer(self.VERSION_INDEX, 4)

    def sender(self):
        return self._read_pubkey(self.SENDER_INDEX)

    def recipient(self):
        return self._read_pubkey(self.RECIPIENT_INDEX)

    def source_domain(self):
        return self._read_integer(self.SOURCE_DOMAIN_INDEX, 4)

    def destination_domain(self):
        return self._read_integer(self.DESTINATION_DOMAIN_INDEX, 4)

    def destination_caller(self):
        return self._read_pubkey(self.DESTINATION_CALLER_INDEX)

    def nonce(self):
        return self._read_integer(self.NONCE_INDEX, 8)

    def message_body(self):
        return self.data[self.MESSAGE_BODY_INDEX:]

    def _read_integer(self, index, size):
        field = self.data[index:utils.checked_add(index, size)]
        if len(field) != size:
            raise MessageTransmitterError(ErrorCode.MALFORMED_MESSAGE)
        return int.from_bytes(field, "big")

    def _read_pubkey(self, index):
        field = self.data[index:utils.checked_add(index, Pubkey.LENGTH)]
        if len(field) != Pubkey.LENGTH:
            raise MessageTransmitterError(ErrorCode.MALFORMED_MESSAGE)
        return Pubkey(field)

    def __len__(self):
        return len(self.data)

    def __bytes__(self):
        return self.data

    def __repr__(self):
        return f"Message({self.data.hex()})"