"""Summary model for call graph metrics."""

from __future__ import annotations

from pydantic import BaseModel, Field

from contract.artifacts import ARTIFACT_SCHEMA_VERSION


class GraphSummary(BaseModel):
    """Summary of call graph metrics."""

    schema_version: int = Field(default=ARTIFACT_SCHEMA_VERSION)
    symbol_count: int
    function_count: int
    variable_count: int
    public_count: int
    private_count: int
    call_edge_count: int
    reference_edge_count: int
    cycles: list[list[str]] = Field(
        default_factory=list,
        description="Strongly connected components over calls and references",
    )
    fan_in: dict[str, int] = Field(default_factory=dict)
    fan_out: dict[str, int] = Field(default_factory=dict)
    top_functions: list[str] = Field(default_factory=list)


__all__ = ["GraphSummary"]
