"""Functional tests for hydrating definitions with response data and for the
root model's linkId/id indices."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from reactive_questionnaire.logic.hydration import match_response_items
from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse
from reactive_questionnaire.models.questionnaire import QuestionnaireItem
from reactive_questionnaire.models.questionnaire_response import QuestionnaireResponseItem

from fhir_builders import answered, item, questionnaire, response


def test_repeating_items_hydrate_one_node_per_response_instance_in_order() -> None:
    definition = questionnaire(item("med", "string", repeats=True))
    data = response(
        answered("med", {"valueString": "one"}, id="m1"),
        answered("med", {"valueString": "two"}, id="m2"),
        answered("med", {"valueString": "three"}, id="m3"),
    )
    root = ReactiveQuestionnaireResponse(definition, data)

    nodes = root.get_items("med")
    assert [n.id for n in nodes] == ["m1", "m2", "m3"]
    assert [n.answer[0].value for n in nodes] == ["one", "two", "three"]
    assert root.items == nodes


def test_unmatched_definition_yields_single_node_with_empty_answer() -> None:
    root = ReactiveQuestionnaireResponse(questionnaire(item("name"), item("age", "integer")))

    assert len(root.get_items("name")) == 1
    assert root.get_items("name")[0].answer == []
    assert root.get_items("age")[0].answer is not None


def test_hydration_follows_definition_order_not_response_order() -> None:
    definition = questionnaire(item("first"), item("second"))
    data = response(answered("second", {"valueString": "b"}), answered("first", {"valueString": "a"}))
    root = ReactiveQuestionnaireResponse(definition, data)

    assert [n.link_id for n in root.items] == ["first", "second"]


def test_response_items_without_definition_are_ignored() -> None:
    definitions = [QuestionnaireItem(link_id="known", type="string")]
    data = [
        QuestionnaireResponseItem(link_id="stray"),
        QuestionnaireResponseItem(link_id="known"),
    ]
    pairs = match_response_items(definitions, data)

    assert [(d.link_id, r.link_id if r else None) for d, r in pairs] == [("known", "known")]


def test_nested_groups_hydrate_children_with_parent_links() -> None:
    definition = questionnaire(
        item("household", "group", repeats=True, item=[item("member", "string")]),
    )
    data = response(
        {"linkId": "household", "item": [answered("member", {"valueString": "Ann"})]},
        {"linkId": "household", "item": [answered("member", {"valueString": "Bo"})]},
    )
    root = ReactiveQuestionnaireResponse(definition, data)

    groups = root.get_items("household")
    members = root.get_items("member")
    assert len(groups) == 2
    assert [m.answer[0].value for m in members] == ["Ann", "Bo"]
    assert members[0].parent is groups[0]
    assert members[1].parent is groups[1]
    assert groups[0].parent is root


def test_group_without_response_synthesizes_children() -> None:
    definition = questionnaire(item("g", "group", item=[item("child"), item("other")]))
    root = ReactiveQuestionnaireResponse(definition)

    group = root.get_items("g")[0]
    assert [c.link_id for c in group.items] == ["child", "other"]
    assert all(c.answer == [] for c in group.items)


def test_indices_agree_with_traversal() -> None:
    definition = questionnaire(
        item("a"),
        item("g", "group", item=[item("b"), item("c", repeats=True)]),
    )
    data = response(
        answered("a", {"valueString": "x"}, id="id-a"),
        {"linkId": "g", "id": "id-g", "item": [answered("c", {"valueString": "1"}), answered("c", {"valueString": "2"})]},
    )
    root = ReactiveQuestionnaireResponse(definition, data)

    traversed = list(root.iter_items())
    indexed = [node for link_id in root.link_ids() for node in root.get_items(link_id)]
    assert len(traversed) == len(indexed) == 5
    assert {id(n) for n in traversed} == {id(n) for n in indexed}
    assert [n.link_id for n in traversed] == ["a", "g", "b", "c", "c"]
    assert root.get_item_by_id("id-a") is traversed[0]
    assert root.get_item_by_id("id-g") is traversed[1]

    visited = []
    root.for_each_item(visited.append)
    assert visited == traversed


def test_children_register_before_parent() -> None:
    definition = questionnaire(item("g", "group", item=[item("inner")]), item("after"))
    root = ReactiveQuestionnaireResponse(definition)

    assert root.link_ids() == ["inner", "g", "after"]


def test_duplicate_ids_keep_last_registered_node() -> None:
    definition = questionnaire(item("first"), item("second"))
    data = response(answered("first", id="dup"), answered("second", id="dup"))
    root = ReactiveQuestionnaireResponse(definition, data)

    assert root.get_item_by_id("dup") is root.get_items("second")[0]


def test_indices_are_read_only_after_construction() -> None:
    root = ReactiveQuestionnaireResponse(questionnaire(item("a")))

    with pytest.raises(RuntimeError):
        root.register_item(root.items[0])
    root.get_items("a").clear()
    assert len(root.get_items("a")) == 1


def test_unknown_lookups_return_empty() -> None:
    root = ReactiveQuestionnaireResponse(questionnaire(item("a")))

    assert root.get_items("nope") == []
    assert root.get_item_by_id("nope") is None


@pytest.mark.parametrize(
    "bad_item",
    [
        {"type": "string"},
        {"linkId": "x"},
        {"linkId": "", "type": "string"},
        {"linkId": "x", "type": "not-a-type"},
    ],
)
def test_structurally_invalid_definition_is_rejected(bad_item) -> None:
    with pytest.raises(ValidationError):
        ReactiveQuestionnaireResponse(questionnaire(bad_item))


def test_malformed_answer_is_rejected() -> None:
    data = response(answered("a", {"valueString": "x", "valueInteger": 1}))
    with pytest.raises(ValidationError):
        ReactiveQuestionnaireResponse(questionnaire(item("a")), data)


def test_root_defaults() -> None:
    root = ReactiveQuestionnaireResponse(questionnaire(item("a"), id_="intake"))

    assert root.status == "in-progress"
    assert root.questionnaire == "intake"
    assert root.id is None

    custom = ReactiveQuestionnaireResponse(questionnaire(item("a")), default_status="completed")
    assert custom.status == "completed"
