"""Hydration of definition items with response data.

Matching is driven by the definition order. For each definition every
not-yet-consumed response item with the same linkId is claimed, keeping the
response order, so a repeating item yields one node per response instance.
When nothing matches, one node is synthesized from the definition alone.

Nodes register with the root after all of their descendants have registered;
siblings register in definition order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union
import logging

from reactive_questionnaire.logic.response_item import ReactiveResponseItem
from reactive_questionnaire.models.questionnaire import QuestionnaireItem
from reactive_questionnaire.models.questionnaire_response import QuestionnaireResponseItem

if TYPE_CHECKING:  # pragma: no cover
    from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse

logger = logging.getLogger(__name__)


def match_response_items(
    definitions: Sequence[QuestionnaireItem],
    response_items: Sequence[QuestionnaireResponseItem],
) -> List[Tuple[QuestionnaireItem, Optional[QuestionnaireResponseItem]]]:
    """Pair definitions with response items in hydration order.

    Response items whose linkId matches no definition are left unconsumed and
    do not appear in the result.
    """
    pairs: List[Tuple[QuestionnaireItem, Optional[QuestionnaireResponseItem]]] = []
    consumed: set[int] = set()
    for definition in definitions:
        matches: List[QuestionnaireResponseItem] = []
        for index, response_item in enumerate(response_items):
            if index not in consumed and response_item.link_id == definition.link_id:
                matches.append(response_item)
                consumed.add(index)
        if not matches:
            pairs.append((definition, None))
            continue
        pairs.extend((definition, match) for match in matches)

    unmatched = len(response_items) - len(consumed)
    if unmatched:
        logger.debug(
            "hydrate_unmatched_response_items count=%s link_ids=%s",
            unmatched,
            [r.link_id for i, r in enumerate(response_items) if i not in consumed],
        )
    return pairs


def hydrate_children(
    definitions: Sequence[QuestionnaireItem],
    response_items: Sequence[QuestionnaireResponseItem],
    parent: Union[ReactiveResponseItem, "ReactiveQuestionnaireResponse"],
    root: "ReactiveQuestionnaireResponse",
) -> List[ReactiveResponseItem]:
    """Build the ordered child nodes for ``parent``."""
    nodes: List[ReactiveResponseItem] = []
    for definition, response_item in match_response_items(definitions, response_items):
        node = ReactiveResponseItem(definition, response_item, parent, root)
        child_data = response_item.item if response_item is not None else None
        node.items.extend(hydrate_children(definition.item or [], child_data or [], node, root))
        root.register_item(node)
        logger.debug("hydrate_item link_id=%s id=%s children=%s", node.link_id, node.id, len(node.items))
        nodes.append(node)
    return nodes


__all__ = ["match_response_items", "hydrate_children"]
