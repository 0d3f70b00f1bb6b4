"""Base model for check definitions and probe configuration."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model that rejects keys it does not declare.

    Definitions are written by hand, so a misspelled key is an error rather
    than a silently ignored setting.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
