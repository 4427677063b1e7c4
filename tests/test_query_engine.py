import pytest

from models.dataset_models import Dataset
from models.query_models import QueryKind, QuerySpec
from services.query_engine import QueryEngine


def ids(result):
    return [row["id"] for row in result.rows]


def test_aggregate_requested_functions_only():
    ds = Dataset.from_records([{"x": v} for v in [1, 2, 3, 4]])
    result = QueryEngine(ds).execute("aggregate", {"column": "x", "functions": ["sum", "count", "avg"]})

    assert result.rows == [{"sum": 10, "count": 4, "average": 2.5}]
    assert result.description == "Aggregated statistics for x"


def test_aggregate_skips_non_numeric_values():
    ds = Dataset.from_records([{"x": v} for v in ["1", "x", None, 3]])
    result = QueryEngine(ds).execute("aggregate", {"column": "x", "functions": ["count", "sum", "max", "min"]})

    assert result.rows == [{"count": 2, "sum": 4, "maximum": 3, "minimum": 1}]


def test_aggregate_over_empty_column_returns_one_row():
    ds = Dataset.from_records([{"x": None}, {"x": "a"}])
    result = QueryEngine(ds).execute("aggregate", {"column": "x", "functions": ["count", "avg"]})

    assert result.rows == [{"count": 0, "average": None}]


def test_correlation_of_perfectly_linear_columns():
    ds = Dataset.from_records([{"x": x, "y": y} for x, y in [(1, 2), (2, 4), (3, 6)]])
    result = QueryEngine(ds).execute("correlation", {"column1": "x", "column2": "y"})

    row = result.rows[0]
    assert row["correlation"] == pytest.approx(1.0)
    assert row["sampleSize"] == 3
    assert row["column1"] == "x" and row["column2"] == "y"


def test_correlation_zero_variance_reports_zero():
    ds = Dataset.from_records([{"x": 5, "y": y} for y in [1, 2, 3]])
    result = QueryEngine(ds).execute("correlation", {"column1": "x", "column2": "y"})

    assert result.rows[0]["correlation"] == 0
    assert result.rows[0]["sampleSize"] == 3


def test_correlation_without_numeric_pairs(sales_dataset):
    result = QueryEngine(sales_dataset).execute("correlation", {"column1": "region", "column2": "sales"})

    assert len(result.rows) == 1
    assert result.rows[0]["sampleSize"] == 0
    assert result.rows[0]["correlation"] == 0


def test_filter_greater_keeps_numeric_matches_in_order(sales_dataset):
    result = QueryEngine(sales_dataset).execute("filter", {"column": "age", "operator": "greater", "value": "30"})

    assert ids(result) == [2, 3, 6]
    assert result.description == "Filtered 3 rows where age greater 30"


def test_filter_less_excludes_non_numeric(sales_dataset):
    result = QueryEngine(sales_dataset).execute("filter", {"column": "sales", "operator": "less", "value": 60})

    assert ids(result) == [2, 3, 6]


def test_filter_caps_rows_but_reports_full_count():
    ds = Dataset.from_records([{"id": i, "v": i} for i in range(150)])
    result = QueryEngine(ds).execute("filter", {"column": "v", "operator": "greater", "value": "-1"})

    assert len(result.rows) == 100
    assert result.rows[0]["id"] == 0
    assert result.description.startswith("Filtered 150 rows")


def test_listing_limit_is_configurable():
    ds = Dataset.from_records([{"id": i, "v": i} for i in range(150)])

    assert len(QueryEngine(ds, listing_limit=10).execute("sort", {"column": "v"}).rows) == 10
    assert len(QueryEngine(ds, listing_limit=None).execute("sort", {"column": "v"}).rows) == 150


def test_filter_equals_compares_numbers_numerically(sales_dataset):
    result = QueryEngine(sales_dataset).execute("filter", {"column": "sales", "operator": "equals", "value": "50.0"})
    assert ids(result) == [2]

    result = QueryEngine(sales_dataset).execute("filter", {"column": "sales", "operator": "equals", "value": 100})
    assert ids(result) == [1]


def test_filter_equals_strings_is_case_sensitive(sales_dataset):
    engine = QueryEngine(sales_dataset)

    assert ids(engine.execute("filter", {"column": "region", "operator": "equals", "value": "North"})) == [1, 3, 6]
    assert ids(engine.execute("filter", {"column": "region", "operator": "equals", "value": "north"})) == []


def test_filter_contains_is_case_insensitive(sales_dataset):
    result = QueryEngine(sales_dataset).execute("filter", {"column": "region", "operator": "contains", "value": "NOR"})

    assert ids(result) == [1, 3, 6]


def test_group_by_counts_every_row_with_nulls_in_one_group(sales_dataset):
    result = QueryEngine(sales_dataset).execute("groupBy", {"column": "region"})

    assert result.rows == [
        {"region": "North", "count": 3},
        {"region": "South", "count": 2},
        {"region": None, "count": 1},
        {"region": "East", "count": 1},
    ]
    assert sum(r["count"] for r in result.rows) == len(sales_dataset)
    non_null = sum(r["count"] for r in result.rows if r["region"] is not None)
    assert non_null == sum(1 for row in sales_dataset.rows if row["region"] is not None)


def test_group_by_with_aggregate_column(sales_dataset):
    result = QueryEngine(sales_dataset).execute(
        "groupBy", {"column": "region", "aggregateColumn": "sales", "aggregateFunction": "sum"}
    )

    by_region = {r["region"]: r for r in result.rows}
    assert by_region["North"]["sum_sales"] == 135
    assert by_region["South"]["sum_sales"] == 50
    assert by_region[None]["sum_sales"] == 0
    assert result.description == "Grouped by region with sum of sales"


def test_group_by_avg_of_group_without_numbers_is_none(sales_dataset):
    result = QueryEngine(sales_dataset).execute(
        "groupBy", {"column": "region", "aggregateColumn": "sales", "aggregateFunction": "avg"}
    )

    by_region = {r["region"]: r for r in result.rows}
    assert by_region["North"]["avg_sales"] == pytest.approx(45.0)
    assert by_region[None]["avg_sales"] is None


def test_group_by_stringifies_keys():
    ds = Dataset.from_records([{"k": 1}, {"k": "1"}, {"k": 1.0}, {"k": 2}])
    result = QueryEngine(ds).execute("groupBy", {"column": "k"})

    assert result.rows == [{"k": "1", "count": 3}, {"k": "2", "count": 1}]


def test_group_limit_caps_groups_when_configured(sales_dataset):
    result = QueryEngine(sales_dataset, group_limit=2).execute("groupBy", {"column": "region"})
    assert len(result.rows) == 2


def test_sort_mixed_values_numbers_first_nulls_last():
    ds = Dataset.from_records([{"id": i, "v": v} for i, v in enumerate([3, "b", 1, None, "a", 2.5])])
    engine = QueryEngine(ds)

    asc = engine.execute("sort", {"column": "v", "direction": "asc"})
    assert [r["v"] for r in asc.rows] == [1, 2.5, 3, "a", "b", None]
    assert asc.description == "Sorted by v in ascending order"

    desc = engine.execute("sort", {"column": "v", "direction": "desc"})
    assert [r["v"] for r in desc.rows] == ["b", "a", 3, 2.5, 1, None]


def test_sort_is_stable_for_equal_keys():
    ds = Dataset.from_records([{"id": i, "v": v} for i, v in enumerate([2, 1, 2, 1])])
    engine = QueryEngine(ds)

    assert ids(engine.execute("sort", {"column": "v"})) == [1, 3, 0, 2]
    assert ids(engine.execute("sort", {"column": "v", "direction": "desc"})) == [0, 2, 1, 3]


def test_top_n_ranks_groups_by_count(sales_dataset):
    result = QueryEngine(sales_dataset).execute("topN", {"column": "region", "n": 3})

    assert len(result.rows) <= 3
    assert [r["region"] for r in result.rows] == ["North", "South", None]
    counts = [r["count"] for r in result.rows]
    assert counts == sorted(counts, reverse=True)
    assert result.description == "Top 3 values in region"


def test_top_n_runs_from_query_spec(sales_dataset):
    spec = QuerySpec.build(QueryKind.TOP_N, column="region", n=1)
    result = QueryEngine(sales_dataset).execute_spec(spec)

    assert result.rows == [{"region": "North", "count": 3}]


def test_unknown_query_type_returns_empty_result(sales_dataset):
    result = QueryEngine(sales_dataset).execute("bogus", {})

    assert result.description == "Unknown query type"
    assert result.rows == []


def test_invalid_params_do_not_raise(sales_dataset):
    result = QueryEngine(sales_dataset).execute("filter", {"column": "age"})

    assert result.description == "Invalid parameters for filter"
    assert result.rows == []


@pytest.mark.parametrize("params", ["column=age", ["age"], 42])
def test_non_mapping_params_do_not_raise(sales_dataset, params):
    result = QueryEngine(sales_dataset).execute("sort", params)

    assert result.description == "Invalid parameters for sort"
    assert result.rows == []


def test_failing_operation_comes_back_as_empty_result(sales_dataset):
    engine = QueryEngine(sales_dataset)

    def explode(params):
        raise RuntimeError("boom")

    engine._handlers[QueryKind.AGGREGATE] = explode
    result = engine.execute("aggregate", {"column": "sales"})

    assert result.description == "Query aggregate failed"
    assert result.rows == []
