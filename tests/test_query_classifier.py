import pytest

from models.query_models import QueryKind
from services.query_classifier import classify_question


@pytest.mark.parametrize(
    "text, operator, value",
    [
        ("Filter data where age > 30", "greater", "30"),
        ("show rows where age < 18?", "less", "18"),
        ("where price = 9.99", "equals", "9.99"),
        ("find customers where name contains Smith", "contains", "Smith"),
    ],
)
def test_filter_intent(text, operator, value):
    spec = classify_question(text)

    assert spec.kind == QueryKind.FILTER
    assert spec.params.operator == operator
    assert spec.params.value == value


def test_filter_captures_column():
    spec = classify_question("Filter data where age > 30")
    assert spec.params.column == "age"


def test_group_by_intent_ignores_trailing_clause():
    spec = classify_question("Group by region and count")

    assert spec.kind == QueryKind.GROUP_BY
    assert spec.params.column == "region"


def test_top_n_intent():
    spec = classify_question("Show me top 10 records by region")

    assert spec.kind == QueryKind.TOP_N
    assert spec.params.n == 10
    assert spec.params.column == "region"
    assert spec.params.sort_by == "count"


@pytest.mark.parametrize(
    "text, column, direction",
    [
        ("sort by age desc", "age", "desc"),
        ("Sort the data by age descending", "age", "desc"),
        ("order by salary", "salary", "asc"),
        ("sorted by score asc.", "score", "asc"),
    ],
)
def test_sort_intent(text, column, direction):
    spec = classify_question(text)

    assert spec.kind == QueryKind.SORT
    assert spec.params.column == column
    assert spec.params.direction == direction


def test_aggregate_intent_requests_all_functions():
    spec = classify_question("Show statistics for sales.")

    assert spec.kind == QueryKind.AGGREGATE
    assert spec.params.column == "sales"
    assert spec.params.functions == ["count", "avg", "min", "max", "sum"]


def test_first_matching_intent_wins():
    spec = classify_question("group by region where sales > 10")
    assert spec.kind == QueryKind.FILTER


def test_no_match_returns_none():
    assert classify_question("What does this dataset tell us about growth?") is None


def test_columns_resolve_to_dataset_spelling():
    columns = ["Region", "Power Output (kWh)"]

    assert classify_question("Group by REGION", columns=columns).params.column == "Region"

    spec = classify_question("where Power Output (kWh) > 50", columns=columns)
    assert spec.params.column == "Power Output (kWh)"
    assert spec.params.value == "50"


def test_params_payload_uses_wire_names():
    spec = classify_question("top 3 in region")
    assert spec.params_payload() == {"column": "region", "n": 3, "sortBy": "count"}


def test_filter_value_keeps_typed_case():
    spec = classify_question("Filter data WHERE Region = North", columns=["region"])

    assert spec.params.column == "region"
    assert spec.params.operator == "equals"
    assert spec.params.value == "North"


def test_uppercase_sort_direction_is_normalised():
    spec = classify_question("SORT BY Age DESC")

    assert spec.params.column == "age"
    assert spec.params.direction == "desc"
