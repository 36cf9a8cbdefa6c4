"""Functional tests for the json-logic expression oracle."""

from __future__ import annotations

import json

import pytest

from reactive_questionnaire.logic.json_logic_oracle import JsonLogicOracle
from reactive_questionnaire.logic.oracle import AnswerData, ExpressionError
from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse

from fhir_builders import FHIRPATH, answered, calculated, item, questionnaire, response


@pytest.fixture
def root() -> ReactiveQuestionnaireResponse:
    definition = questionnaire(
        item("age", "integer"),
        item("name", "string"),
        item("dx", "choice"),
        item("empty", "string"),
    )
    data = response(
        answered("age", {"valueInteger": 42}),
        answered("name", {"valueString": "Ada"}),
        answered("dx", {"valueCoding": {"system": "s", "code": "c"}}),
    )
    return ReactiveQuestionnaireResponse(definition, data)


def test_answer_data_exposes_first_answer_primitives(root) -> None:
    data = AnswerData(root)

    assert data["age"] == 42
    assert data["dx"] == {"system": "s", "code": "c"}
    assert "empty" not in data
    assert "unknown" not in data
    assert set(data) == {"age", "name", "dx", "empty"}
    with pytest.raises(KeyError):
        data["empty"]


def test_evaluate_wraps_scalar_results(root, json_logic_oracle) -> None:
    assert json_logic_oracle.evaluate(json.dumps({">": [{"var": "age"}, 18]}), root) == [True]
    assert json_logic_oracle.evaluate(json.dumps({"cat": ["Hi ", {"var": "name"}]}), root) == ["Hi Ada"]
    assert json_logic_oracle.evaluate(json.dumps({"var": "dx.code"}), root) == ["c"]


def test_evaluate_passes_lists_through(root, json_logic_oracle) -> None:
    assert json_logic_oracle.evaluate(json.dumps({"merge": [[1], [2, 3]]}), root) == [1, 2, 3]


def test_missing_input_yields_empty_result(root, json_logic_oracle) -> None:
    assert json_logic_oracle.evaluate(json.dumps({"+": [{"var": "age"}, {"var": "empty"}]}), root) == []
    assert json_logic_oracle.evaluate(json.dumps({"var": "unknown"}), root) == []


def test_var_with_default_does_not_short_circuit(root, json_logic_oracle) -> None:
    rule = {"+": [{"var": "age"}, {"var": ["empty", 0]}]}
    assert json_logic_oracle.evaluate(json.dumps(rule), root) == [42]


def test_division_by_zero_yields_empty_result(root, json_logic_oracle) -> None:
    assert json_logic_oracle.evaluate(json.dumps({"/": [{"var": "age"}, 0]}), root) == []


def test_invalid_json_raises_expression_error(root, json_logic_oracle) -> None:
    with pytest.raises(ExpressionError):
        json_logic_oracle.evaluate("age + 1", root)


def test_unknown_operation_raises_expression_error(root, json_logic_oracle) -> None:
    with pytest.raises(ExpressionError):
        json_logic_oracle.evaluate(json.dumps({"frobnicate": [1]}), root)


def test_parsed_rules_are_cached(root, mocker) -> None:
    loads = mocker.spy(json, "loads")
    oracle = JsonLogicOracle(cache_size=4)
    expression = json.dumps({"var": "age"})

    oracle.evaluate(expression, root)
    oracle.evaluate(expression, root)
    assert loads.call_count == 1


def test_failing_upstream_formula_propagates_to_dependents(json_logic_oracle) -> None:
    definition = questionnaire(
        item("c", "decimal", extension=calculated("not json")),
        item("d", "decimal", extension=calculated(json.dumps({"+": [{"var": "c"}, 1]}))),
    )
    root = ReactiveQuestionnaireResponse(definition, oracle=json_logic_oracle)

    with pytest.raises(ExpressionError):
        root.get_items("d")[0].answer


def test_dotted_link_ids_are_addressable(json_logic_oracle) -> None:
    definition = questionnaire(
        item("1", "group", item=[item("1.1", "integer"), item("1.2", "choice")]),
    )
    data = response(
        {"linkId": "1", "item": [answered("1.1", {"valueInteger": 4}), answered("1.2", {"valueCoding": {"code": "x"}})]},
    )
    root = ReactiveQuestionnaireResponse(definition, data)

    assert json_logic_oracle.evaluate(json.dumps({"+": [{"var": "1.1"}, 1]}), root) == [5]
    assert json_logic_oracle.evaluate(json.dumps({"var": "1.2.code"}), root) == ["x"]
    assert json_logic_oracle.evaluate(json.dumps({"var": "1.2.system"}), root) == []


def test_rejects_other_expression_languages(root, json_logic_oracle) -> None:
    with pytest.raises(ExpressionError):
        json_logic_oracle.evaluate("1 + 1", root, language=FHIRPATH)
