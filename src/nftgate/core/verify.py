import re

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature, ValidationError
from web3 import Web3

from nftgate.shared.logger import Logger

logger = Logger(__name__).get_logger()

SIGNATURE_LENGTH = 65
RECOVERY_IDS = {0, 1, 27, 28}
HEX_PATTERN = re.compile(r"[0-9a-fA-F]+")


def decode_signature(signature_hex: str) -> bytes | None:
    """
    Decodes a hex encoded r || s || v signature.
    Returns None unless it is exactly 65 bytes with a usable recovery id.
    """
    if signature_hex[:2].lower() == "0x":
        signature_hex = signature_hex[2:]

    # bytes.fromhex tolerates whitespace between bytes
    if not HEX_PATTERN.fullmatch(signature_hex):
        logger.debug("Signature is not valid hex.")
        return None

    if len(signature_hex) != SIGNATURE_LENGTH * 2:
        logger.debug(
            "Signature has %s hex digits, expected %s.",
            len(signature_hex),
            SIGNATURE_LENGTH * 2,
        )
        return None

    signature = bytes.fromhex(signature_hex)

    if signature[-1] not in RECOVERY_IDS:
        logger.debug("Signature has unsupported recovery id %s.", signature[-1])
        return None

    return signature


def recover_signer(message: str, signature_hex: str) -> str | None:
    """
    Recovers the checksum address that signed ``message`` as an EIP-191
    personal message. Returns None for any malformed or unrecoverable signature.
    """
    signature = decode_signature(signature_hex)
    if signature is None:
        return None

    try:
        address = Account.recover_message(encode_defunct(text=message), signature=signature)
    except (BadSignature, ValidationError, ValueError, TypeError) as e:
        logger.debug("Signature recovery failed: %s", e)
        return None

    logger.debug("Recovered signer %s.", address)
    return address


def same_address(a: str | None, b: str | None) -> bool:
    if not a or not b or not Web3.is_address(a) or not Web3.is_address(b):
        return False
    return Web3.to_checksum_address(a) == Web3.to_checksum_address(b)
