"""Supplementary feedback returned by the review collaborator."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Grade = Literal["A", "B", "C", "D", "F"]


class SupplementaryFeedback(BaseModel):
    """Qualitative review of a design.

    Field names are camelCase on the wire. Any numeric score in a response is
    ignored: the engine's own score is authoritative.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    detailed_analysis: str = ""
    optimal_solution: str = ""
    architecture_grade: Grade = "C"
    cost_optimization: str = ""
    scalability_notes: str = ""
    security_considerations: str = ""
    source: Literal["model", "local"] = "model"
