"""Used-nonce account addresses and lookups."""

from .pubkey import PROGRAM_ID, Pubkey, find_program_address
from .state import UsedNonces

USED_NONCES_SEED = b"used_nonces"


def used_nonces_seeds(source_domain, nonce):
    """Seeds of the used-nonces account that records the given nonce."""
    return [
        USED_NONCES_SEED,
        str(source_domain).encode(),
        UsedNonces.used_nonces_seed_delimiter(source_domain),
        str(UsedNonces.first_nonce_for(nonce)).encode(),
    ]


def get_nonce_pda(nonce, source_domain, program_id=PROGRAM_ID):
    """Address of the used-nonces account for a nonce from a source domain."""
    address, _bump = find_program_address(
        used_nonces_seeds(source_domain, nonce), program_id
    )
    return address


def is_nonce_used(account_data, owner, nonce, program_id=PROGRAM_ID):
    """Whether the nonce is recorded as used; an empty account means it is not."""
    if not account_data:
        return False
    used_nonces = UsedNonces.from_bytes(account_data)
    if Pubkey(owner) != Pubkey(program_id):
        raise ValueError("used nonces account is not owned by the program")
    return used_nonces.is_nonce_used(nonce)