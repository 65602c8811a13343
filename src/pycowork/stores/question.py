"""The single active set of clarifying questions.

The agent protocol is turn based and a tool call cannot block on the user, so
``askQuestion`` only fills this store and returns. The UI walks the user
through the set (``next_question``/``prev_question``, ``select_option`` or
``set_custom_answer``), calls ``submit_answers`` and sends the snapshot back to
the agent as a new turn, then ``clear_questions``.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Optional

from .observable import Observable

Answers = dict[str, dict[str, Optional[str]]]


@dataclass(frozen=True)
class QuestionOption:
    id: str
    label: str


@dataclass(frozen=True)
class Question:
    id: str
    question: str
    options: tuple[QuestionOption, ...] = ()
    allow_custom: bool = True
    selected_option_id: str | None = None
    custom_answer: str | None = None

    @property
    def answered(self) -> bool:
        return bool(self.selected_option_id) or bool(self.custom_answer)

    def selected_label(self) -> str | None:
        if not self.selected_option_id:
            return None
        return next((o.label for o in self.options if o.id == self.selected_option_id), None)

    @staticmethod
    def from_obj(obj: "Question | Mapping[str, Any]", index: int) -> "Question":
        if isinstance(obj, Question):
            q = obj
        else:
            allow_custom = obj.get("allowCustom", obj.get("allow_custom", True))
            q = Question(
                id=str(obj.get("id") or ""),
                question=str(obj.get("question") or ""),
                options=tuple(
                    o if isinstance(o, QuestionOption) else QuestionOption(id=str(o["id"]), label=str(o["label"]))
                    for o in obj.get("options") or ()
                ),
                allow_custom=True if allow_custom is None else bool(allow_custom),
            )
        return replace(q, id=q.id or f"q-{index}", selected_option_id=None, custom_answer=None)


@dataclass(frozen=True)
class QuestionSet:
    id: str
    questions: tuple[Question, ...]
    current_index: int = 0
    submitted: bool = False

    @property
    def current_question(self) -> Question | None:
        if not self.questions:
            return None
        return self.questions[self.current_index]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "currentIndex": self.current_index,
            "submitted": self.submitted,
            "questions": [
                {
                    "id": q.id,
                    "question": q.question,
                    "options": [{"id": o.id, "label": o.label} for o in q.options],
                    "allowCustom": q.allow_custom,
                    "selectedOptionId": q.selected_option_id,
                    "customAnswer": q.custom_answer,
                }
                for q in self.questions
            ],
        }


class QuestionStore(Observable):
    def __init__(self) -> None:
        super().__init__()
        self._active: QuestionSet | None = None

    @property
    def active_question_set(self) -> QuestionSet | None:
        return self._active

    def set_questions(self, questions: Iterable["Question | Mapping[str, Any]"]) -> str:
        """Replace any previous set, submitted or not, and return the new set id."""
        set_id = f"qs-{uuid.uuid4().hex[:8]}"
        self._active = QuestionSet(
            id=set_id,
            questions=tuple(Question.from_obj(q, i) for i, q in enumerate(questions)),
        )
        self._notify()
        return set_id

    def _update_question(self, question_id: str, **changes: Any) -> None:
        qs = self._active
        if qs is None:
            return
        self._active = replace(
            qs,
            questions=tuple(replace(q, **changes) if q.id == question_id else q for q in qs.questions),
        )
        self._notify()

    def select_option(self, question_id: str, option_id: str) -> None:
        self._update_question(question_id, selected_option_id=option_id, custom_answer=None)

    def set_custom_answer(self, question_id: str, answer: str) -> None:
        self._update_question(question_id, selected_option_id=None, custom_answer=answer)

    def _move(self, step: int) -> None:
        qs = self._active
        if qs is None:
            return
        last = max(len(qs.questions) - 1, 0)
        self._active = replace(qs, current_index=min(max(qs.current_index + step, 0), last))
        self._notify()

    def next_question(self) -> None:
        self._move(1)

    def prev_question(self) -> None:
        self._move(-1)

    def submit_answers(self) -> Answers:
        qs = self._active
        if qs is None:
            return {}
        answers: Answers = {
            q.id: {"selectedOption": q.selected_label(), "customAnswer": q.custom_answer}
            for q in qs.questions
        }
        self._active = replace(qs, submitted=True)
        self._notify()
        return answers

    def clear_questions(self) -> None:
        self._active = None
        self._notify()

    def has_unanswered_questions(self) -> bool:
        qs = self._active
        if qs is None or qs.submitted:
            return False
        return any(not q.answered for q in qs.questions)


def format_answers(question_set: QuestionSet, answers: Mapping[str, Mapping[str, Optional[str]]]) -> str:
    """Render submitted answers as the user message for the agent's next turn."""
    lines = ["Here are my answers:"]
    for q in question_set.questions:
        a = answers.get(q.id) or {}
        text = a.get("customAnswer") or a.get("selectedOption") or "(no answer)"
        lines.append(f"- {q.question}: {text}")
    return "\n".join(lines)
