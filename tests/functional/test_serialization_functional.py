"""Functional tests for projecting the live tree back to the wire format."""

from __future__ import annotations

from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse

from fhir_builders import TableOracle, answered, calculated, first_value, item, questionnaire, response


def _definition() -> dict:
    return questionnaire(
        item("name", "string", text="Name"),
        item("visits", "group", repeats=True, item=[item("date", "date"), item("reason", "string")]),
        item("weight", "quantity"),
        item("dx", "choice"),
        item("double", "decimal", extension=calculated("double")),
        item("notes", "text", enableWhen=[{"question": "name", "operator": "exists"}]),
        id_="intake",
    )


def _oracle() -> TableOracle:
    def double(root):
        weight = first_value(root, "weight")
        return [] if weight is None else [weight.value * 2]

    return TableOracle({"double": double})


def _response() -> dict:
    return response(
        answered("name", {"valueString": "Ada"}, id="n1"),
        {"linkId": "visits", "id": "v1", "item": [answered("date", {"valueDate": "2024-01-02"})]},
        {"linkId": "visits", "id": "v2", "item": [answered("reason", {"valueString": "check-up"})]},
        answered("weight", {"valueQuantity": {"value": 70, "unit": "kg"}}),
        answered("dx", {"valueCoding": {"system": "http://snomed.info/sct", "code": "38341003"}}),
        id="resp-1",
        questionnaire="Questionnaire/intake",
        status="completed",
    )


def _state(root: ReactiveQuestionnaireResponse) -> list:
    return [
        (
            node.link_id,
            node.id,
            node.enabled,
            None if node.answer is None else [a.to_fhir() for a in node.answer],
        )
        for node in root.iter_items()
    ]


def test_round_trip_is_stable() -> None:
    first = ReactiveQuestionnaireResponse(_definition(), _response(), oracle=_oracle())
    wire = first.to_fhir()
    second = ReactiveQuestionnaireResponse(_definition(), wire, oracle=_oracle())

    assert _state(second) == _state(first)
    assert second.to_fhir() == wire


def test_to_fhir_shape() -> None:
    root = ReactiveQuestionnaireResponse(_definition(), _response(), oracle=_oracle())
    wire = root.to_fhir()

    assert wire["resourceType"] == "QuestionnaireResponse"
    assert wire["id"] == "resp-1"
    assert wire["status"] == "completed"
    assert wire["questionnaire"] == "Questionnaire/intake"
    assert [i["linkId"] for i in wire["item"]] == ["name", "visits", "visits", "weight", "dx", "double", "notes"]
    assert wire["item"][0] == {"linkId": "name", "id": "n1", "text": "Name", "answer": [{"valueString": "Ada"}]}
    assert wire["item"][1]["item"][0] == {"linkId": "date", "answer": [{"valueDate": "2024-01-02"}]}
    assert wire["item"][1]["item"][1] == {"linkId": "reason"}
    assert wire["item"][3]["answer"] == [{"valueQuantity": {"value": 70.0, "unit": "kg"}}]
    assert wire["item"][5]["answer"] == [{"valueDecimal": 140.0}]


def test_unset_and_empty_answers_are_omitted() -> None:
    root = ReactiveQuestionnaireResponse(questionnaire(item("a"), item("b")))
    root.get_items("a")[0].answer = None

    assert root.get_items("a")[0].answer is None
    assert root.get_items("b")[0].answer == []
    assert root.to_fhir()["item"] == [{"linkId": "a"}, {"linkId": "b"}]


def test_answer_setter_accepts_models_and_wire_dicts() -> None:
    root = ReactiveQuestionnaireResponse(questionnaire(item("a", "integer")))
    node = root.get_items("a")[0]
    node.answer = [{"valueInteger": 4}]
    node.answer = node.answer + [{"valueInteger": 5}]

    assert [a.value for a in node.answer] == [4, 5]


def test_stored_answer_extras_are_not_carried() -> None:
    data = response(answered("a", {"valueString": "x", "item": [{"linkId": "nested"}]}))
    root = ReactiveQuestionnaireResponse(questionnaire(item("a")), data)

    assert root.to_fhir()["item"] == [{"linkId": "a", "answer": [{"valueString": "x"}]}]
