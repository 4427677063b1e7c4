from typing import Optional
import logging

from pydantic import ValidationError

from models.common_models import ChartConfig, ChatRequest, ChatResponse
from models.dataset_models import Dataset
from .chart_extractor import extract_chart_config
from .chart_service import prepare_chart_data, render_chart
from .llm_service import LLMService, build_system_prompt
from .query_classifier import classify_question
from .query_engine import QueryEngine
from .summary_service import build_dataset_context

logger = logging.getLogger(__name__)

MARKED_STRATEGIES = ("marker_fenced", "marker_inline")


def answer_question(
    dataset: Dataset,
    req: ChatRequest,
    llm: LLMService,
    render_images: bool = True,
) -> ChatResponse:
    """
    One chat turn: classify -> query -> generate -> extract chart.
    GenerationServiceError from the llm propagates to the caller.
    """
    engine = QueryEngine(dataset)

    query_result = None
    query_type, query_params = req.query_type, req.query_params
    if query_type:
        query_result = engine.execute(query_type, query_params or {})
    else:
        query = classify_question(req.message, columns=dataset.columns)
        if query is not None:
            query_result = engine.execute_spec(query)
            query_type, query_params = query.kind.value, query.params_payload()

    system_prompt = build_system_prompt(
        build_dataset_context(dataset),
        query_type=query_type,
        query_params=query_params,
        query_result=query_result,
        context=req.context,
    )

    generated = llm.generate(system_prompt, req.message)
    extraction = extract_chart_config(generated)

    response = ChatResponse(
        response=extraction.clean_text,
        query={"kind": query_type, "params": query_params or {}} if query_type else None,
        query_result=query_result,
    )

    if extraction.chart_config is None:
        return response

    chart = _validate_chart(extraction.chart_config)
    if chart is None:
        # an unmarked block that is not a chart is part of the answer
        if extraction.strategy not in MARKED_STRATEGIES:
            response.response = generated.strip()
        return response

    chart_data = prepare_chart_data(chart, dataset.rows)
    response.chart_config = chart
    response.chart_data = chart_data
    if render_images:
        response.chart_image_base64 = render_chart(chart, chart_data)
    return response


def _validate_chart(raw: dict) -> Optional[ChartConfig]:
    try:
        return ChartConfig.model_validate(raw)
    except ValidationError as e:
        logger.warning("Dropping chart config %s: %s", raw, e)
        return None
