from nftgate.core.challenge import build_challenge
from nftgate.core.ledger import LedgerClient
from nftgate.core.verify import recover_signer, same_address
from nftgate.models import Authorized, Decision, Forbidden, ForbiddenCause
from nftgate.shared.logger import Logger

logger = Logger(__name__).get_logger()


class OwnershipGate:
    """Decides whether a signature proves ownership of an NFT.

    Per request the gate moves through
    ``Received -> SignatureRecovered | RecoveryFailed -> OwnerFetched | LedgerError
    -> Authorized | Forbidden``. A failed recovery ends in ``Forbidden`` without
    touching the ledger. Ledger failures are raised as ``LedgerError`` and are
    never turned into a decision.

    The gate keeps no state between calls; the ledger client is shared.
    """

    def __init__(self, ledger: LedgerClient):
        self.ledger = ledger

    def authorize(self, token_id: int, signature: str) -> Decision:
        challenge = build_challenge(token_id)

        signer = recover_signer(challenge, signature)
        if signer is None:
            logger.info("Token %s: forbidden (signature not recoverable)", token_id)
            return Forbidden(token_id=token_id, cause=ForbiddenCause.RECOVERY_FAILED)

        owner = self.ledger.owner_of(token_id)

        if not same_address(signer, owner):
            logger.info("Token %s: forbidden (signer %s, owner %s)", token_id, signer, owner)
            return Forbidden(token_id=token_id, cause=ForbiddenCause.NOT_OWNER)

        logger.info("Token %s: authorized for %s", token_id, owner)
        return Authorized(token_id=token_id, owner=owner)
