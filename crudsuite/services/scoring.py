# crudsuite/services/scoring.py
import logging
from typing import Any, Dict, List

from crudsuite.core.errors import ConflictError, ValidationError
from crudsuite.repositories import quizzes as quizzes_repo
from crudsuite.repositories import users as users_repo

logger = logging.getLogger(__name__)

PASS_MARK = 60.0
# compare-and-set attempts on the quiz aggregate before giving up
MAX_AGGREGATE_RETRIES = 10


def grade(percentage: float) -> str:
    if percentage >= 90:
        return "A"
    if percentage >= 80:
        return "B"
    if percentage >= 70:
        return "C"
    if percentage >= 60:
        return "D"
    return "F"


def with_verdict(result: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a stored result with its ``grade`` and ``passed`` filled in."""
    out = dict(result)
    out["grade"] = grade(out["percentage"])
    out["passed"] = out["percentage"] >= PASS_MARK
    return out


def next_average(old_average: float, attempts: int, score: float) -> float:
    """Running mean after the ``attempts``-th submission (attempts counts it)."""
    return (old_average * (attempts - 1) + score) / attempts


def score_answers(questions: List[Dict[str, Any]], answers: List[int]) -> Dict[str, Any]:
    if len(answers) != len(questions):
        raise ValidationError("Invalid answers submitted")
    score = 0
    results = []
    for question, answer in zip(questions, answers):
        is_correct = answer == question["correct_answer"]
        if is_correct:
            score += 1
        results.append({
            "question": question["question"],
            "options": question["options"],
            "user_answer": answer,
            "correct_answer": question["correct_answer"],
            "is_correct": is_correct,
        })
    percentage = round(score / len(questions) * 100, 2)
    return {"score": score, "total_questions": len(questions), "percentage": percentage, "results": results}


async def submit_quiz(quiz: Dict[str, Any], user: Dict[str, Any], answers: List[int], time_taken: int = 0) -> Dict[str, Any]:
    scored = score_answers(quiz["questions"], answers)

    result = await quizzes_repo.insert_result({
        "quiz_id": quiz["id"],
        "quiz_title": quiz["title"],
        "user_id": user["id"],
        "username": user["name"],
        "score": scored["score"],
        "total_questions": scored["total_questions"],
        "percentage": scored["percentage"],
        "answers": list(answers),
        "time_taken": time_taken,
    })

    current = quiz
    for _ in range(MAX_AGGREGATE_RETRIES):
        seen = int(current.get("attempts", 0))
        attempts = seen + 1
        average = next_average(float(current.get("average_score", 0.0)), attempts, scored["score"])
        if await quizzes_repo.record_attempt_if(quiz["id"], seen, attempts, average):
            break
        current = await quizzes_repo.get_quiz(quiz["id"])
        if current is None:
            await quizzes_repo.delete_result(result["id"])
            raise ConflictError("Quiz was deleted during submission")
    else:
        logger.error("Quiz %s aggregate update kept conflicting", quiz["id"])
        raise ConflictError("Quiz is busy, please retry")

    await users_repo.increment_counter(user["id"], "quizzes_taken", 1)

    return {
        "score": scored["score"],
        "total_questions": scored["total_questions"],
        "percentage": scored["percentage"],
        "grade": grade(scored["percentage"]),
        "passed": scored["percentage"] >= PASS_MARK,
        "results": scored["results"],
    }


def quiz_stats(quiz: Dict[str, Any], results: List[Dict[str, Any]]) -> Dict[str, Any]:
    scores = [r["score"] for r in results]
    passed = [r for r in results if r["percentage"] >= PASS_MARK]
    return {
        "total_attempts": quiz.get("attempts", 0),
        "average_score": quiz.get("average_score", 0.0),
        "highest_score": max(scores) if scores else 0,
        "lowest_score": min(scores) if scores else 0,
        "pass_rate": round(len(passed) / len(results) * 100, 2) if results else 0,
    }
