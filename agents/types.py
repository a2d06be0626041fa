"""Shared type definitions for the interview coach."""
from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system"]
Difficulty = Literal["Facile", "Moyen", "Difficile"]

QUESTION_CATEGORIES: List[str] = [
    "introduction",  # présentation
    "experience",
    "competences",
    "motivation",
    "situations",  # mises en situation
    "lacunes",  # inactivité, échecs
    "aspirations",
    "conclusion",
]


class Stage(str, Enum):
    INTRODUCTION = "Introduction"
    PREPARATION = "Preparation"
    SIMULATION = "Simulation"
    FEEDBACK = "Feedback"

    def next(self) -> "Stage":
        """Cyclic progression; Feedback loops back to Preparation."""

        return _NEXT_STAGE[self]


_NEXT_STAGE: Dict[Stage, Stage] = {
    Stage.INTRODUCTION: Stage.PREPARATION,
    Stage.PREPARATION: Stage.SIMULATION,
    Stage.SIMULATION: Stage.FEEDBACK,
    Stage.FEEDBACK: Stage.PREPARATION,
}


def _uid() -> str:
    return str(uuid.uuid4())


class MessageDto(BaseModel):
    """One role-tagged conversation turn."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    def as_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class UserProfile(BaseModel):
    user_id: str
    name: str = "Utilisateur"
    preferred_language: str = "French"
    job_sector: str = "Non spécifié"
    experience: str = "Débutant"
    language_level: str = "Intermédiaire"
    digital_skill_level: str = "Faible"
    saved_responses: Dict[str, str] = Field(default_factory=dict)

    # "menu", "evaluation" or "update:<field>"
    current_state: str = "menu"
    evaluation_step: int = Field(default=0, ge=0, le=8)
    vulnerability_profile: Dict[str, str] = Field(default_factory=dict)

    experience_level: str = "débutant"
    anxiety_level: str = "moyen"
    learning_preference: str = "progressif"
    specific_needs: str = ""
    profile_summary: str = ""
    analysis: str = ""
    is_profile_evaluated: bool = False

    model_config = ConfigDict(validate_assignment=True)


class InterviewQuestion(BaseModel):
    id: str = Field(default_factory=_uid)
    question: str
    category: str
    difficulty: Difficulty = "Moyen"
    tips: str = ""
    job_sectors: List[str] = Field(default_factory=list)


class PreparedQuestion(BaseModel):
    """A question generated ahead of a timed simulation."""

    id: str
    question: str
    tips: str
    category: str = ""

    @classmethod
    def from_question(cls, question: InterviewQuestion) -> "PreparedQuestion":
        return cls(id=question.id, question=question.question, tips=question.tips, category=question.category)


class InterviewSession(BaseModel):
    """Serializable state tracked for one user across messages."""

    session_id: str = Field(default_factory=_uid, frozen=True)
    profile: UserProfile
    stage: Stage = Stage.INTRODUCTION
    history: List[MessageDto] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    feedback: Dict[str, str] = Field(default_factory=dict)
    prepared_questions: List[PreparedQuestion] = Field(default_factory=list)
    prepared_cursor: int = 0

    @property
    def user_id(self) -> str:
        return self.profile.user_id

    def touch(self) -> None:
        self.updated_at = datetime.now()

    def add_message(self, role: Role, content: str) -> None:
        self.history.append(MessageDto(role=role, content=content))
        self.touch()

    def add_user_message(self, content: str) -> None:
        self.add_message("user", content)

    def add_bot_message(self, content: str) -> None:
        self.add_message("assistant", content)

    def recent_history(self, limit: int) -> List[MessageDto]:
        if limit <= 0:
            return []
        return list(self.history[-limit:])

    def set_stage(self, stage: Stage) -> Stage:
        """Switch stage and return the previous one."""

        previous = self.stage
        self.stage = stage
        self.touch()
        return previous

    def next_prepared_question(self) -> Optional[PreparedQuestion]:
        if self.prepared_cursor >= len(self.prepared_questions):
            return None
        question = self.prepared_questions[self.prepared_cursor]
        self.prepared_cursor += 1
        self.touch()
        return question


__all__ = [
    "Difficulty",
    "InterviewQuestion",
    "InterviewSession",
    "MessageDto",
    "PreparedQuestion",
    "QUESTION_CATEGORIES",
    "Role",
    "Stage",
    "UserProfile",
]
