from __future__ import annotations

import json

from langchain_core.prompts import PromptTemplate

# Use cases shown to the model for each chart type, in catalogue order.
CHART_CATALOGUE: dict[str, tuple[str, list[str]]] = {
    "line": (
        "LINE CHARTS",
        [
            "Time series data showing trends",
            "Financial metrics over time",
            "Market performance tracking",
        ],
    ),
    "bar": (
        "BAR CHARTS",
        [
            "Single metric comparisons",
            "Period-over-period analysis",
            "Category performance",
        ],
    ),
    "multiBar": (
        "MULTI-BAR CHARTS",
        [
            "Multiple metrics comparison",
            "Side-by-side performance analysis",
            "Cross-category insights",
        ],
    ),
    "area": (
        "AREA CHARTS",
        [
            "Volume or quantity over time",
            "Cumulative trends",
            "Market size evolution",
        ],
    ),
    "stackedArea": (
        "STACKED AREA CHARTS",
        [
            "Component breakdowns over time",
            "Portfolio composition changes",
            "Market share evolution",
        ],
    ),
    "pie": (
        "PIE CHARTS",
        [
            "Distribution analysis",
            "Market share breakdown",
            "Portfolio allocation",
        ],
    ),
}

EXAMPLE_CHART: dict = {
    "chartType": "line",
    "config": {
        "title": "Chart Title",
        "description": "Chart Description",
        "xAxisKey": "x_axis_key",
        "trend": {"percentage": 10, "direction": "up"},
        "footer": "Footer note",
    },
    "data": [
        {"x_axis_key": "value1", "metric1": 100, "metric2": 200},
        {"x_axis_key": "value2", "metric1": 150, "metric2": 250},
    ],
    "chartConfig": {
        "metric1": {"label": "Metric 1 Label"},
        "metric2": {"label": "Metric 2 Label"},
    },
}


def _render_catalogue() -> str:
    sections: list[str] = []
    for number, (chart_type, (heading, use_cases)) in enumerate(
        CHART_CATALOGUE.items(), start=1
    ):
        lines = [f'{number}. {heading} ("{chart_type}")']
        lines.extend(f"   - {use_case}" for use_case in use_cases)
        sections.append("\n".join(lines))
    return "\n\n".join(sections)


SYSTEM_PROMPT = (
    "You are a financial data visualization expert. Your role is to analyze "
    "financial data and create clear, meaningful visualizations. Always respond "
    "with a valid JSON object containing 'explanation' and 'chartData' keys, even "
    "if no chart is needed. If no chart is required, use null for 'chartData'. "
    "Do not include any text outside of the JSON object in your response.\n\n"
    "Here are the chart types available and their ideal use cases:\n\n"
    + _render_catalogue()
    + """

When generating visualizations:
1. Structure data correctly based on the chart type
2. Use descriptive titles and clear descriptions
3. Include trend information when relevant (percentage and direction)
4. Add contextual footer notes
5. Use proper data keys that reflect the actual metrics

Always:
- Generate real, contextually appropriate data
- Use proper financial formatting
- Include relevant trends and insights
- Structure data exactly as needed for the chosen chart type
- Choose the most appropriate visualization for the data

Never:
- Use placeholder or static data
- Include technical implementation details in responses
- Add any text or characters outside of the JSON object

Focus on clear financial insights and let the visualization enhance understanding.

Respond with a JSON object containing two keys: 'explanation' for your text response, and 'chartData' for the visualization data. The 'chartData' should follow this structure:

"""
    + json.dumps(EXAMPLE_CHART, indent=2)
    + """

If no chart is needed, set 'chartData' to null. Remember, your entire response must be a valid JSON object."""
)


TEXT_ATTACHMENT_PROMPT = PromptTemplate.from_template(
    "File contents of {file_name}:\n\n{file_text}\n\n{message}"
)

IMAGE_ATTACHMENT_PROMPT = PromptTemplate.from_template(
    "[An image was uploaded. As an AI language model, I cannot process or "
    "view images directly.]\n\n{message}"
)
