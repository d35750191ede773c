# crudsuite/api/v1/quizzes.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from crudsuite.api.v1.auth import get_current_user
from crudsuite.core.errors import ForbiddenError, NotFoundError
from crudsuite.core.security import is_admin
from crudsuite.models.quiz import QuizCreate, QuizSubmit, QuizUpdate
from crudsuite.repositories import quizzes as quizzes_repo
from crudsuite.repositories import users as users_repo
from crudsuite.services import scoring

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])


def public_quiz(quiz: dict) -> dict:
    """Quiz as a taker sees it: questions without their correct answers."""
    out = dict(quiz)
    out["questions"] = [
        {k: v for k, v in q.items() if k != "correct_answer"} for q in quiz.get("questions", [])
    ]
    return out


async def _load_quiz(quiz_id: str) -> dict:
    quiz = await quizzes_repo.get_quiz(quiz_id)
    if not quiz:
        raise NotFoundError("Quiz not found")
    return quiz


def _check_owner(quiz: dict, user: dict, action: str) -> None:
    if quiz["created_by"] != user["id"] and not is_admin(user["role"]):
        raise ForbiddenError(f"You can only {action} your own quizzes")


@router.get("")
async def list_quizzes(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
):
    quizzes = await quizzes_repo.list_public(search=search, category=category, difficulty=difficulty)
    return [public_quiz(q) for q in quizzes]


# /user/* must be registered before /{quiz_id}
@router.get("/user/my-quizzes")
async def my_quizzes(current_user: dict = Depends(get_current_user)):
    return await quizzes_repo.list_by_creator(current_user["id"])


@router.get("/user/history")
async def my_history(current_user: dict = Depends(get_current_user)):
    return [scoring.with_verdict(r) for r in await quizzes_repo.history(current_user["id"])]


@router.get("/{quiz_id}")
async def get_quiz(quiz_id: str):
    return public_quiz(await _load_quiz(quiz_id))


@router.post("", status_code=201)
async def create_quiz(payload: QuizCreate, current_user: dict = Depends(get_current_user)):
    fields = payload.model_dump()
    fields["created_by"] = current_user["id"]
    fields["creator_name"] = current_user["name"]
    quiz = await quizzes_repo.create_quiz(fields)
    await users_repo.increment_counter(current_user["id"], "quizzes_created", 1)
    logger.info("Quiz %s created by %s", quiz["id"], current_user["id"])
    return {"message": "Quiz created successfully", "quiz": public_quiz(quiz)}


@router.put("/{quiz_id}")
async def update_quiz(quiz_id: str, payload: QuizUpdate, current_user: dict = Depends(get_current_user)):
    quiz = await _load_quiz(quiz_id)
    _check_owner(quiz, current_user, "edit")
    fields = payload.model_dump(exclude_unset=True, exclude_none=True)
    if fields:
        quiz = await quizzes_repo.update_quiz(quiz_id, fields)
        if not quiz:
            raise NotFoundError("Quiz not found")
    return {"message": "Quiz updated successfully", "quiz": public_quiz(quiz)}


@router.delete("/{quiz_id}")
async def delete_quiz(quiz_id: str, current_user: dict = Depends(get_current_user)):
    quiz = await _load_quiz(quiz_id)
    _check_owner(quiz, current_user, "delete")
    if not await quizzes_repo.delete_quiz(quiz_id):
        raise NotFoundError("Quiz not found")
    removed = await quizzes_repo.delete_results(quiz_id)
    await users_repo.increment_counter(quiz["created_by"], "quizzes_created", -1)
    logger.info("Quiz %s deleted with %d results", quiz_id, removed)
    return {"message": "Quiz deleted successfully"}


@router.post("/{quiz_id}/submit")
async def submit_quiz(quiz_id: str, payload: QuizSubmit, current_user: dict = Depends(get_current_user)):
    quiz = await _load_quiz(quiz_id)
    return await scoring.submit_quiz(quiz, current_user, payload.answers, payload.time_taken)


@router.get("/{quiz_id}/leaderboard")
async def leaderboard(quiz_id: str, limit: int = Query(10, ge=1, le=100)):
    await _load_quiz(quiz_id)
    return [scoring.with_verdict(r) for r in await quizzes_repo.leaderboard(quiz_id, limit=limit)]


@router.get("/{quiz_id}/stats")
async def quiz_stats(quiz_id: str, current_user: dict = Depends(get_current_user)):
    quiz = await _load_quiz(quiz_id)
    _check_owner(quiz, current_user, "view stats for")
    results = await quizzes_repo.list_results(quiz_id)
    return scoring.quiz_stats(quiz, results)
