from __future__ import annotations

from typing import Any

from ..base import ToolContext, ToolResult, ToolSpec, Success, guarded
from ..schema import ArrayParam, BooleanParam, ObjectParam, StringParam

DESCRIPTION = """Ask the user one or more questions when you need clarification or input. Each question has multiple choice options. The user can also provide a custom answer. Use this when you need to:
- Clarify requirements or preferences
- Choose between multiple approaches
- Get confirmation before proceeding with a significant action
- Gather missing information

IMPORTANT: After calling this tool, you MUST STOP and wait for the user's response. Do not continue with other tasks until you receive the answers."""

_OPTION = ObjectParam(
    properties={
        "id": StringParam(description="Unique identifier for this option"),
        "label": StringParam(description="The option text to display"),
    },
    required=("id", "label"),
)

_QUESTION = ObjectParam(
    properties={
        "id": StringParam(description="Unique identifier for this question"),
        "question": StringParam(description="The question to ask the user"),
        "options": ArrayParam(items=_OPTION, min_items=2, max_items=5, description="2-5 multiple choice options"),
        "allowCustom": BooleanParam(default=True, description='Whether to show a "Write your own answer" option'),
    },
    required=("id", "question", "options"),
)


class QuestionTool:
    spec = ToolSpec(
        name="askQuestion",
        description=DESCRIPTION,
        params=ObjectParam(
            properties={
                "questions": ArrayParam(
                    items=_QUESTION, min_items=1, max_items=5, description="1-5 questions to ask the user"
                ),
            },
            required=("questions",),
        ),
        permission_key="read",
    )

    @guarded("Failed to display questions")
    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        questions = args["questions"]
        set_id = ctx.questions.set_questions(questions)
        # answers arrive on a later turn, once the user submits in the UI
        return Success({
            "success": True,
            "message": "Questions displayed to user. Waiting for their response...",
            "questionSetId": set_id,
            "questionCount": len(questions),
            "waitingForResponse": True,
        })
