"""In-memory store of live form sessions.

Maps generated form ids to live ``ReactiveQuestionnaireResponse`` instances
for the HTTP layer. The store is bounded: once ``max_forms`` is reached the
oldest session is evicted. Nothing is persisted.

Sync route handlers run on a threadpool, so every session carries its own
lock and callers reach a form through ``checkout``, which holds that lock for
the whole read/write/render sequence of one request.
"""

from __future__ import annotations

from collections import OrderedDict
from contextlib import contextmanager
from typing import Iterator, Optional
import logging
import threading
import uuid

from reactive_questionnaire.logic.questionnaire_response import ReactiveQuestionnaireResponse

logger = logging.getLogger(__name__)


class _Session:
    __slots__ = ("form", "lock")

    def __init__(self, form: ReactiveQuestionnaireResponse) -> None:
        self.form = form
        self.lock = threading.RLock()


class FormStore:
    def __init__(self, max_forms: int = 1000) -> None:
        if max_forms <= 0:
            raise ValueError("max_forms must be positive")
        self.max_forms = max_forms
        self._sessions: "OrderedDict[str, _Session]" = OrderedDict()
        self._guard = threading.Lock()

    def add(self, form: ReactiveQuestionnaireResponse) -> str:
        form_id = str(uuid.uuid4())
        with self._guard:
            self._sessions[form_id] = _Session(form)
            while len(self._sessions) > self.max_forms:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("form_evicted form_id=%s", evicted)
        logger.info("form_created form_id=%s questionnaire=%s", form_id, form.questionnaire)
        return form_id

    def get(self, form_id: str) -> Optional[ReactiveQuestionnaireResponse]:
        with self._guard:
            session = self._sessions.get(form_id)
        return session.form if session is not None else None

    @contextmanager
    def checkout(self, form_id: str) -> Iterator[Optional[ReactiveQuestionnaireResponse]]:
        """Yield the form (or None) while holding its session lock."""
        with self._guard:
            session = self._sessions.get(form_id)
        if session is None:
            yield None
            return
        with session.lock:
            yield session.form

    def remove(self, form_id: str) -> bool:
        with self._guard:
            removed = self._sessions.pop(form_id, None) is not None
        if removed:
            logger.info("form_deleted form_id=%s", form_id)
        return removed

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, form_id: object) -> bool:
        return form_id in self._sessions


__all__ = ["FormStore"]
