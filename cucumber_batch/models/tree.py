"""Input models describing a test tree (e.g. loaded from JSON)."""

from collections.abc import Sequence
from typing import Literal

from pydantic import Field

from cucumber_batch.models.base import Model

type NodeKind = Literal["feature", "rule", "scenario", "outline", "example"]


class NodeSpec(Model):
    """Declarative description of one tree node and its children."""

    kind: NodeKind = Field(..., description="Gherkin construct the node stands for")
    file: str = Field(..., description="Feature file the node belongs to")
    line: int | None = Field(default=None, description="1-based source line")
    label: str = Field(default="", description="Display label")
    children: Sequence["NodeSpec"] = Field(default_factory=list)
