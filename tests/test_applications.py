# tests/test_applications.py
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from crudsuite.core.config import settings
from crudsuite.repositories import jobs as jobs_repo
from crudsuite.repositories import users as users_repo

PDF = b"%PDF-1.4 fake resume"


@pytest.fixture
async def posting(jobs_app, make_user):
    recruiter, headers = await make_user(role="recruiter", name="Rita", company_name="Acme Corp")
    r = await jobs_app.post(
        "/api/jobs",
        json={"title": "Backend Intern", "description": "APIs", "location": "Remote", "salary": "$2000"},
        headers=headers,
    )
    return r.json()["job"], headers


@pytest.fixture
def student(make_user):
    async def _make(name="Stu", resume="/uploads/resumes/resume-abc.pdf"):
        return await make_user(role="student", name=name, resume=resume, skills=["python"])
    return _make


@pytest.mark.asyncio
async def test_apply_requires_resume(jobs_app, posting, student):
    job, _ = posting
    _, headers = await student(resume=None)
    r = await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Please upload your resume before applying"


@pytest.mark.asyncio
async def test_upload_resume_then_apply(jobs_app, posting, student):
    job, _ = posting
    _, headers = await student(resume=None)

    r = await jobs_app.put(
        "/api/auth/profile/student",
        data={"bio": "Hi", "skills": "python, fastapi ,"},
        files={"resume": ("cv.pdf", PDF, "application/pdf")},
        headers=headers,
    )
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["skills"] == ["python", "fastapi"]
    assert user["resume"].startswith("/uploads/resumes/resume-")
    on_disk = Path(settings.UPLOAD_DIR) / user["resume"].split("/uploads/", 1)[1]
    assert on_disk.read_bytes() == PDF

    r = await jobs_app.post("/api/applications", json={"job_id": job["id"], "cover_letter": "Pick me"}, headers=headers)
    assert r.status_code == 201
    application = r.json()["application"]
    assert application["status"] == "pending"
    assert application["applicant_resume"] == user["resume"]
    assert application["applicant_skills"] == ["python", "fastapi"]
    assert "resume" not in application
    assert application["company_name"] == "Acme Corp"
    assert (await jobs_repo.get_job(job["id"]))["application_count"] == 1


@pytest.mark.asyncio
async def test_resume_upload_rejects_wrong_type(jobs_app, student):
    _, headers = await student(resume=None)
    r = await jobs_app.put(
        "/api/auth/profile/student",
        files={"resume": ("cv.docx", b"not a pdf", "application/msword")},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Only PDF files are allowed"


@pytest.mark.asyncio
async def test_bad_resume_stores_no_photo(jobs_app, student):
    user, headers = await student(resume=None)
    r = await jobs_app.put(
        "/api/auth/profile/student",
        files={
            "profile_photo": ("me.png", b"\x89PNG fake", "image/png"),
            "resume": ("cv.docx", b"not a pdf", "application/msword"),
        },
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Only PDF files are allowed"
    photos = Path(settings.UPLOAD_DIR) / "profiles"
    assert not photos.exists() or list(photos.iterdir()) == []
    assert not (await users_repo.get_user(user["id"])).get("profile_photo")


@pytest.mark.asyncio
async def test_oversize_resume_removes_stored_photo(jobs_app, student, monkeypatch):
    user, headers = await student(resume=None)
    monkeypatch.setattr(settings, "MAX_RESUME_BYTES", 1024 * 1024)
    r = await jobs_app.put(
        "/api/auth/profile/student",
        files={
            "profile_photo": ("me.png", b"\x89PNG fake", "image/png"),
            "resume": ("cv.pdf", b"0" * (1024 * 1024 + 1), "application/pdf"),
        },
        headers=headers,
    )
    assert r.status_code == 400
    assert r.json()["message"] == "File too large. Maximum size is 1MB"
    assert list((Path(settings.UPLOAD_DIR) / "profiles").iterdir()) == []
    assert not (await users_repo.get_user(user["id"])).get("profile_photo")


@pytest.mark.asyncio
async def test_duplicate_application(jobs_app, posting, student):
    job, _ = posting
    _, headers = await student()
    assert (await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=headers)).status_code == 201
    r = await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "You have already applied for this job"
    assert (await jobs_repo.get_job(job["id"]))["application_count"] == 1


@pytest.mark.asyncio
async def test_closed_or_expired_job_rejects(jobs_app, posting, student):
    job, recruiter = posting
    _, headers = await student()

    await jobs_repo.update_job(job["id"], {"deadline": datetime.utcnow() - timedelta(days=1)})
    r = await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "This job is no longer accepting applications"

    await jobs_repo.update_job(job["id"], {"deadline": None})
    await jobs_app.delete(f"/api/jobs/{job['id']}", headers=recruiter)
    r = await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=headers)
    assert r.status_code == 400

    r = await jobs_app.post("/api/applications", json={"job_id": "0123456789abcdef01234567"}, headers=headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_recruiter_cannot_apply(jobs_app, posting):
    job, recruiter = posting
    r = await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=recruiter)
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_decision_is_final(jobs_app, posting, student, make_user):
    job, recruiter = posting
    _, other_recruiter = await make_user(role="recruiter")
    _, headers = await student()
    application = (await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=headers)).json()["application"]
    url = f"/api/applications/{application['id']}/status"

    assert (await jobs_app.put(url, json={"status": "accepted"}, headers=other_recruiter)).status_code == 403

    r = await jobs_app.put(url, json={"status": "accepted"}, headers=recruiter)
    assert r.status_code == 200
    assert r.json()["application"]["status"] == "accepted"

    r = await jobs_app.put(url, json={"status": "rejected"}, headers=recruiter)
    assert r.status_code == 400
    assert r.json()["message"] == "Cannot change status from accepted to rejected"


@pytest.mark.asyncio
async def test_cannot_decide_back_to_pending(jobs_app, posting, student):
    job, recruiter = posting
    _, headers = await student()
    application = (await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=headers)).json()["application"]
    r = await jobs_app.put(f"/api/applications/{application['id']}/status", json={"status": "pending"}, headers=recruiter)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_withdraw_rules(jobs_app, posting, student):
    job, recruiter = posting
    _, alice = await student(name="Alice")
    _, bob = await student(name="Bob")
    first = (await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=alice)).json()["application"]
    second = (await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=bob)).json()["application"]
    assert (await jobs_repo.get_job(job["id"]))["application_count"] == 2

    assert (await jobs_app.delete(f"/api/applications/{first['id']}", headers=bob)).status_code == 403

    r = await jobs_app.delete(f"/api/applications/{first['id']}", headers=alice)
    assert r.status_code == 200
    assert (await jobs_repo.get_job(job["id"]))["application_count"] == 1
    assert (await jobs_app.get(f"/api/applications/{first['id']}", headers=alice)).status_code == 404

    await jobs_app.put(f"/api/applications/{second['id']}/status", json={"status": "rejected"}, headers=recruiter)
    r = await jobs_app.delete(f"/api/applications/{second['id']}", headers=bob)
    assert r.status_code == 400
    assert r.json()["message"] == "Cannot withdraw application that has been processed"


@pytest.mark.asyncio
async def test_application_visibility(jobs_app, posting, student, make_user):
    job, recruiter = posting
    _, other_recruiter = await make_user(role="recruiter")
    _, alice = await student(name="Alice")
    _, bob = await student(name="Bob")
    application = (await jobs_app.post("/api/applications", json={"job_id": job["id"]}, headers=alice)).json()["application"]

    mine = (await jobs_app.get("/api/applications/my-applications", headers=alice)).json()
    assert [a["id"] for a in mine] == [application["id"]]
    assert (await jobs_app.get("/api/applications/my-applications", headers=bob)).json() == []

    r = await jobs_app.get(f"/api/applications/job/{job['id']}", headers=recruiter)
    assert [a["applicant_name"] for a in r.json()] == ["Alice"]
    assert (await jobs_app.get(f"/api/applications/job/{job['id']}", headers=other_recruiter)).status_code == 403

    url = f"/api/applications/{application['id']}"
    assert (await jobs_app.get(url, headers=alice)).status_code == 200
    assert (await jobs_app.get(url, headers=recruiter)).status_code == 200
    assert (await jobs_app.get(url, headers=bob)).status_code == 403
    assert (await jobs_app.get(url, headers=other_recruiter)).status_code == 403
