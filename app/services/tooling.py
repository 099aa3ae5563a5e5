from __future__ import annotations

from dataclasses import dataclass
from typing import get_args

from google.genai import types

from app.models.finance import ChartType


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: types.Schema

    def as_function_declaration(self) -> types.FunctionDeclaration:
        return types.FunctionDeclaration(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
        )

    def as_tool(self) -> types.Tool:
        return types.Tool(function_declarations=[self.as_function_declaration()])


def make_chart_tool() -> ToolSpec:
    """Declaration of the chart generation capability.

    Mirrors ``ChartDescriptor``. The finance handler asks for the same shape
    through its system prompt and does not attach this tool to the request.
    """
    trend = types.Schema(
        type=types.Type.OBJECT,
        required=["percentage", "direction"],
        properties={
            "percentage": types.Schema(type=types.Type.NUMBER),
            "direction": types.Schema(type=types.Type.STRING, enum=["up", "down"]),
        },
    )

    config = types.Schema(
        type=types.Type.OBJECT,
        required=["title", "description"],
        properties={
            "title": types.Schema(type=types.Type.STRING),
            "description": types.Schema(type=types.Type.STRING),
            "trend": trend,
            "footer": types.Schema(type=types.Type.STRING),
            "totalLabel": types.Schema(type=types.Type.STRING),
            "xAxisKey": types.Schema(type=types.Type.STRING),
        },
    )

    parameters = types.Schema(
        type=types.Type.OBJECT,
        required=["chartType", "config", "data", "chartConfig"],
        properties={
            "chartType": types.Schema(
                type=types.Type.STRING,
                enum=list(get_args(ChartType)),
                description="The type of chart to generate",
            ),
            "config": config,
            "data": types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(type=types.Type.OBJECT),
            ),
            "chartConfig": types.Schema(
                type=types.Type.OBJECT,
                description=(
                    "Mapping from data series key to an object with a required "
                    "string `label` and an optional boolean `stacked`."
                ),
            ),
        },
    )

    return ToolSpec(
        name="generate_graph_data",
        description="Generate structured JSON data for creating financial charts and graphs.",
        parameters=parameters,
    )


CHART_TOOL = make_chart_tool()
