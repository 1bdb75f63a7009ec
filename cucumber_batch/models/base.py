"""Base model for report and target data."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model that ignores fields it does not declare.

    Cucumber JSON carries many fields (tags, durations, embeddings) that the
    correlation never reads.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")
