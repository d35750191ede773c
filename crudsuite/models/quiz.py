# crudsuite/models/quiz.py
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class QuestionIn(BaseModel):
    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=4, max_length=4)
    correct_answer: int = Field(ge=0, le=3)


class QuizCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    questions: List[QuestionIn] = Field(min_length=1)
    time_limit: int = Field(default=0, ge=0, le=180)
    category: str = "General"
    difficulty: Difficulty = Difficulty.MEDIUM
    tags: List[str] = Field(default_factory=list)
    is_public: bool = True


class QuizUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    # questions are fixed once results may exist against them
    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    time_limit: Optional[int] = Field(default=None, ge=0, le=180)
    category: Optional[str] = Field(default=None, min_length=1)
    difficulty: Optional[Difficulty] = None
    tags: Optional[List[str]] = None
    is_public: Optional[bool] = None


class QuizSubmit(BaseModel):
    answers: List[int]
    time_taken: int = Field(default=0, ge=0)
