from __future__ import annotations

import logging
from typing import Any

from ..base import Failure, Success, ToolContext, ToolResult, ToolSpec
from ..schema import ObjectParam, StringParam
from ...util.format import truncate

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 500

NOT_WIRED = "Skill registry is not available in this session."


class SearchSkillsTool:
    spec = ToolSpec(
        name="searchSkills",
        description=(
            "Search for skills on the skill registry. Skills are pre-built automation capabilities that can help "
            "you perform tasks you couldn't do otherwise.\n\n"
            "IMPORTANT: Before using the browser to accomplish a task, ALWAYS search for relevant skills first. "
            "Skills are faster, more reliable, and often already authenticated.\n\n"
            "If a relevant skill is found, install it and use its instructions instead of opening the browser."
        ),
        permission_key="network",
        params=ObjectParam(
            properties={
                "query": StringParam(
                    description='Search query to find relevant skills (e.g., "whatsapp", "twitter", "gmail")'
                ),
            },
            required=("query",),
        ),
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        query = args["query"]
        if ctx.skills is None:
            return Failure(message=NOT_WIRED, retryable=False)
        try:
            skills = await ctx.skills.search_or_raise(query)
        except Exception as e:
            return Failure(
                message=str(e) or "Failed to search skills",
                suggestion="Network error. You can try the browser instead.",
            )
        if not skills:
            return Success({
                "success": True,
                "skills": [],
                "message": f'No skills found for "{query}". You may need to use the browser instead.',
            })
        return Success({
            "success": True,
            "skills": [
                {"id": s.id, "name": s.name, "description": s.description, "url": ctx.skills.skill_url(s.id)}
                for s in skills
            ],
            "count": len(skills),
            "message": f'Found {len(skills)} skill(s) for "{query}". Install a relevant skill to use it.',
        })


class InstallSkillTool:
    spec = ToolSpec(
        name="installSkill",
        description=(
            "Install a skill from the skill registry. After installation, the skill's instructions will be "
            "available in your system prompt for use.\n\n"
            "Use this after searching for skills and finding one that matches what the user needs."
        ),
        permission_key="network",
        params=ObjectParam(
            properties={
                "skillId": StringParam(
                    description='The skill ID from the search results (e.g., "slack", "imsg", "discord")'
                ),
                "name": StringParam(description="The display name of the skill"),
                "description": StringParam(description="A brief description of what the skill does"),
            },
            required=("skillId", "name", "description"),
        ),
    )

    async def execute(self, ctx: ToolContext, args: dict[str, Any]) -> ToolResult:
        skill_id, name, description = args["skillId"], args["name"], args["description"]
        if ctx.skills is None or ctx.skill_library is None:
            return Failure(message=NOT_WIRED, retryable=False)
        try:
            if ctx.skill_library.find_by_name(name) is not None:
                return Success({
                    "success": True,
                    "alreadyInstalled": True,
                    "message": f'Skill "{name}" is already installed. You can use it now.',
                })

            content = await ctx.skills.get_content(skill_id)
            if not content:
                return Failure(
                    message=f"Failed to fetch skill content for {skill_id}",
                    suggestion="The skill may have been removed. Try searching again.",
                )

            ctx.skill_library.create_skill(
                name=name,
                description=description,
                content=content,
                source_url=ctx.skills.skill_url(skill_id),
            )
        except Exception as e:
            logger.debug("installSkill %s failed", skill_id, exc_info=True)
            return Failure(
                message=str(e) or "Failed to install skill",
                suggestion="Try searching for the skill again or use the browser instead.",
            )

        return Success({
            "success": True,
            "installed": True,
            "name": name,
            "message": (
                f'Successfully installed skill "{name}". The skill instructions are now available. '
                "You can use them to help the user."
            ),
            "skillContent": truncate(content, PREVIEW_CHARS),
            "note": (
                "The full skill content is now part of your context. Follow the instructions in the skill "
                "to help the user."
            ),
        })
