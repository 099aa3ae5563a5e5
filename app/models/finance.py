from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]

ChartType = Literal["bar", "multiBar", "line", "pie", "area", "stackedArea"]


class ConversationMessage(BaseModel):
    role: Role
    content: str


class FileAttachment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base64: str
    media_type: str = Field(default="", alias="mediaType")
    is_text: bool = Field(default=False, alias="isText")
    file_name: str = Field(default="", alias="fileName")

    @property
    def is_image(self) -> bool:
        return self.media_type.startswith("image/")


class FinanceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ConversationMessage]
    model: str
    file_data: FileAttachment | None = Field(default=None, alias="fileData")


# Chart contract the model is asked to produce. Upstream output is never
# validated against these; they describe the prompt's example payload.


class ChartTrend(BaseModel):
    percentage: float
    direction: Literal["up", "down"]


class ChartDisplayConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    trend: ChartTrend | None = None
    footer: str | None = None
    total_label: str | None = Field(default=None, alias="totalLabel")
    x_axis_key: str | None = Field(default=None, alias="xAxisKey")


class SeriesConfig(BaseModel):
    label: str
    stacked: bool | None = None


class ChartDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chart_type: ChartType = Field(alias="chartType")
    config: ChartDisplayConfig
    data: list[dict[str, Any]] = Field(default_factory=list)
    chart_config: dict[str, SeriesConfig] = Field(
        default_factory=dict, alias="chartConfig"
    )


class ModelResponse(BaseModel):
    """What the model answered, after repair.

    Both values are passed through exactly as the model produced them.
    """

    model_config = ConfigDict(populate_by_name=True)

    explanation: Any
    chart_data: Any = Field(alias="chartData")


class FinanceResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: Any
    chart_data: Any = Field(default=None, alias="chartData")


class ErrorResponse(BaseModel):
    error: str
