from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class ForbiddenCause(str, Enum):
    RECOVERY_FAILED = "recovery_failed"
    NOT_OWNER = "not_owner"


class Authorized(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["authorized"] = "authorized"
    token_id: int
    owner: str


class Forbidden(BaseModel):
    """
    Rejection returned for both unrecoverable signatures and wrong signers.
    ``cause`` is kept for logs only; the client sees ``message``.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["forbidden"] = "forbidden"
    token_id: int
    reason: Literal["not owner"] = "not owner"
    cause: ForbiddenCause = Field(default=ForbiddenCause.NOT_OWNER, exclude=True)

    @property
    def message(self) -> str:
        return f"Not owner of NFT #{self.token_id}"


type Decision = Annotated[Authorized | Forbidden, Field(discriminator="kind")]
