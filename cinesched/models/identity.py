"""Schedule entry identity for cinesched.

An identity is either assigned by the store (persisted) or minted locally for an
entry that has not been committed yet (temporary). The two never compare equal.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class PersistedId(BaseModel):
    """Identity assigned by the store."""

    kind: Literal["persisted"] = "persisted"
    value: int = Field(..., description="Store-assigned identifier")

    class Config:
        """Pydantic configuration."""
        frozen = True

    def __str__(self) -> str:
        return str(self.value)


class TemporaryId(BaseModel):
    """Identity minted locally for a not-yet-committed entry."""

    kind: Literal["temporary"] = "temporary"
    token: int = Field(..., description="Locally minted token, never reused within a working set")

    class Config:
        """Pydantic configuration."""
        frozen = True

    def __str__(self) -> str:
        return f"tmp-{self.token}"


Identity = Annotated[Union[PersistedId, TemporaryId], Field(discriminator="kind")]


def is_persisted(identity) -> bool:
    return isinstance(identity, PersistedId)
