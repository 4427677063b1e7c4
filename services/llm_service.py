from typing import Any, Dict, Optional
import json
import logging

from groq import Groq

from config import GROQ_API_KEY, GROQ_MAX_TOKENS, GROQ_MODEL, GROQ_TEMPERATURE
from models.common_models import QueryResult

logger = logging.getLogger(__name__)


class GenerationServiceError(Exception):
    """The generation service failed; the caller may retry."""

    def __init__(self, message: str, configured: bool = True):
        super().__init__(message)
        self.configured = configured
        self.retryable = True


SYSTEM_PROMPT = """You are a data analysis assistant specialized in Excel/CSV spreadsheets.

Key capabilities:
1. Analyze the uploaded spreadsheet data thoroughly
2. Provide statistical insights and trends
3. When users ask for Python code, provide complete, executable snippets
4. Create visualizations when requested
5. Answer questions about data patterns and relationships

VISUALIZATION BEHAVIOR:
When users request a visualization (words like "plot", "chart", "graph", "visualize", "show"):
1. Emit a chart configuration in this EXACT format (on separate lines):
   CHART_CONFIG:
   {"type":"bar","title":"Chart title","xAxis":"column_for_x","yAxis":"column_for_y","aggregation":"none"}
   type is one of bar, line, scatter, pie. aggregation is one of count, sum, avg, none.
   Optionally add "filters": {"column": "required value"}.
2. Follow with a brief explanation of what the chart shows
3. Only show Python code if the user explicitly asks for "code" or "script"

Reference specific columns and values from the dataset when possible."""


def build_system_prompt(
    dataset_context: str,
    query_type: Optional[str] = None,
    query_params: Optional[Dict[str, Any]] = None,
    query_result: Optional[QueryResult] = None,
    context: Optional[str] = None,
) -> str:
    prompt = SYSTEM_PROMPT

    if dataset_context:
        prompt += f"\n\n{dataset_context}"

    if query_type and query_result is not None:
        prompt += (
            "\n\nQuery Result:\n"
            f"Query: {query_type} with parameters {json.dumps(query_params or {}, default=str)}\n"
            f"Result: {json.dumps(query_result.model_dump(), indent=2, default=str)}\n\n"
            "Please analyze and explain this query result in the context of the user's question."
        )

    if context:
        prompt += f"\n\nAdditional context: {context}"

    return prompt


class LLMService:
    """Thin wrapper around the Groq chat-completion API."""

    def __init__(
        self,
        api_key: Optional[str] = GROQ_API_KEY,
        model: str = GROQ_MODEL,
        temperature: float = GROQ_TEMPERATURE,
        max_tokens: int = GROQ_MAX_TOKENS,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client: Optional[Groq] = Groq(api_key=api_key) if api_key else None

    def generate(self, system_prompt: str, message: str) -> str:
        if self.client is None:
            raise GenerationServiceError("Generation API key not configured", configured=False)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": f"User question: {message}"},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.exception("Groq API error")
            raise GenerationServiceError(f"Generation service error: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise GenerationServiceError("No response from generation service")

        text = response.choices[0].message.content
        logger.debug("Raw model response: %s", text)
        return text
