from nftgate.core.errors import InvalidTokenId

CHALLENGE_PREFIX = "Download high resolution file of #"

MAX_TOKEN_ID = 2**256 - 1


def build_challenge(token_id: int) -> str:
    """Message the owner signs to prove control of the owning address."""
    return f"{CHALLENGE_PREFIX}{token_id}"


def parse_token_id(raw: str) -> int:
    # str.isdigit() accepts superscripts and other unicode digits
    if not raw or not raw.isascii() or not raw.isdigit():
        raise InvalidTokenId(f"Token id is not a decimal integer: {raw!r}")

    if len(raw) > len(str(MAX_TOKEN_ID)) or int(raw) > MAX_TOKEN_ID:
        raise InvalidTokenId(f"Token id exceeds uint256: {raw[:80]!r}")

    return int(raw)
