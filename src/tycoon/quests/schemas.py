"""Response schemas for quest endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from tycoon.documents import Achievement, QuestTemplate, UserQuest


class QuestListResponse(BaseModel):
    quests: list[QuestTemplate]


class UserQuestListResponse(BaseModel):
    quests: list[UserQuest]
    new_achievements: list[Achievement] = []
