"""Synthetic seed data for an empty local store."""

from __future__ import annotations

import logging
import random
import time
import uuid
from typing import Any

from talentflow.local_store import LocalStore
from talentflow.query import CANONICAL_STAGES

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000

COMPANIES = [
    "Acme Corp", "Globex", "Initech", "Umbrella", "Hooli",
    "Stark Industries", "Wayne Tech", "Wonka Labs", "Soylent", "Cyberdyne",
]
ROLES = [
    "Frontend Developer", "Backend Engineer", "Full-Stack Engineer",
    "Product Manager", "UI/UX Designer", "Data Scientist", "DevOps Engineer",
    "QA Engineer", "Marketing Manager", "Security Analyst", "HR Generalist",
    "Mobile Developer", "Cloud Engineer", "Data Analyst",
]
LOCATIONS = [
    "San Francisco, CA", "New York, NY", "Seattle, WA", "Austin, TX",
    "Boston, MA", "Los Angeles, CA", "Chicago, IL", "Denver, CO",
    "Atlanta, GA", "Miami, FL", "London, UK",
]
EDUCATION = [
    "BS Computer Science, Stanford University",
    "BS Software Engineering, University of Texas",
    "MS Computer Science, MIT",
    "BFA Interaction Design, RISD",
    "MBA, Harvard Business School",
    "BS Information Systems, UCLA",
    "BS Statistics, University of Chicago",
    "MS Data Science, University of Washington",
]
STATUS_LABELS = ["New", "Active", "In Progress", "Offer Sent", "Hired", "Closed"]
FIRST_NAMES = [
    "Alice", "Bob", "Carol", "David", "Evelyn", "Frank", "Grace", "Henry", "Isabella", "Jack",
    "Karen", "Liam", "Mia", "Noah", "Olivia", "Zane", "Aria", "Brandon", "Sophia", "Ethan",
    "Madison", "Lucas", "Ava", "Daniel", "Chloe", "Mason", "Ella", "James", "Amelia", "Alexander",
]
LAST_NAMES = [
    "Chen", "Rodriguez", "Williams", "Kim", "Johnson", "Miller", "Lee", "Zhao", "Torres", "Nguyen",
    "Smith", "Patel", "Brown", "Garcia", "Martin", "Wilson", "Gomez", "Turner", "Scott", "Carter",
]
SKILLS_BY_ROLE = {
    "Frontend Developer": ["React", "TypeScript", "CSS", "Jest", "Webpack"],
    "Backend Engineer": ["Node.js", "Express", "PostgreSQL", "REST", "Redis"],
    "Full-Stack Engineer": ["React", "Node.js", "MongoDB", "GraphQL", "Docker"],
    "Product Manager": ["Roadmaps", "User Research", "A/B Testing", "SQL"],
    "UI/UX Designer": ["Figma", "Wireframing", "Prototyping", "Design Systems"],
    "Data Scientist": ["Python", "Pandas", "Machine Learning", "SQL", "Scikit-learn"],
    "DevOps Engineer": ["AWS", "Docker", "Kubernetes", "Terraform", "CI/CD"],
    "QA Engineer": ["Test Cases", "Selenium", "Cypress", "Jira"],
    "Marketing Manager": ["SEO", "Content", "Email", "Analytics"],
    "Security Analyst": ["Threat Modeling", "SIEM", "Network Security"],
    "HR Generalist": ["ATS", "Onboarding", "Employee Relations"],
    "Mobile Developer": ["Swift", "Kotlin", "React Native", "Firebase"],
    "Cloud Engineer": ["Azure", "GCP", "Kubernetes", "Terraform"],
    "Data Analyst": ["SQL", "Tableau", "Excel", "Python"],
}
TAGS = ["react", "node", "intern", "remote", "senior", "contract", "ui", "ml"]
RECRUITERS = ["Priya (Recruiter)", "Anita (Hiring Manager)", "Rahul (Interviewer)", "System"]
NOTES = [
    "Great portfolio; schedule tech interview.",
    "Strong culture fit; get hiring manager feedback.",
    "Needs follow-up on availability.",
    "Salary expectations within range.",
    "Asked smart questions in screen.",
]


def _rid(rng: random.Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def _shuffled(rng: random.Random, items: list[str]) -> list[str]:
    copy = list(items)
    rng.shuffle(copy)
    return copy


def _last_contact(rng: random.Random) -> str:
    days = rng.randint(0, 7)
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


def stage_path(final_stage: str) -> list[str]:
    """Stages walked from ``applied`` up to and including ``final_stage``."""
    index = CANONICAL_STAGES.index(final_stage) if final_stage in CANONICAL_STAGES else 0
    return list(CANONICAL_STAGES[: index + 1])


def build_jobs(rng: random.Random, count: int) -> list[dict[str, Any]]:
    jobs = []
    for i in range(count):
        company = rng.choice(COMPANIES)
        role = rng.choice(ROLES)
        jobs.append(
            {
                "title": f"{role} @ {company}",
                "company": company,
                "role": role,
                "slug": f"job-{i + 1}",
                "status": "active" if rng.random() > 0.3 else "archived",
                "tags": _shuffled(rng, TAGS)[: rng.randint(1, 3)],
                "order": i,
                "location": rng.choice(LOCATIONS),
            }
        )
    return jobs


def build_candidates(
    rng: random.Random,
    count: int,
    *,
    job_ids: list[Any],
    jobs: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    candidates = []
    for i in range(count):
        job_index = rng.randrange(len(job_ids)) if job_ids else -1
        role = jobs[job_index]["role"] if job_index >= 0 else "Applicant"
        candidates.append(
            {
                "name": f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                "email": f"user{i + 1}@mail.com",
                "jobId": job_ids[job_index] if job_index >= 0 else None,
                "stage": rng.choice(CANONICAL_STAGES),
                "phone": f"({rng.randint(200, 989)}) {rng.randint(100, 999)}-{rng.randint(1000, 9999)}",
                "location": rng.choice(LOCATIONS),
                "position": role,
                "experience": f"{rng.randint(1, 10)} years",
                "skills": _shuffled(rng, SKILLS_BY_ROLE.get(role, ["Communication", "Teamwork"]))[:4],
                "education": rng.choice(EDUCATION),
                "status": rng.choice(STATUS_LABELS),
                "lastContact": _last_contact(rng),
                "notes": rng.choice(NOTES),
            }
        )
    return candidates


def build_timelines(
    rng: random.Random,
    *,
    candidate_ids: list[Any],
    candidates: list[dict[str, Any]],
    now_ms: int,
) -> list[dict[str, Any]]:
    entries = []
    for idx, candidate_id in enumerate(candidate_ids):
        path = stage_path(candidates[idx]["stage"])
        start_days = len(path) * 2 + (idx % 3)
        for step, stage in enumerate(path):
            entries.append(
                {
                    "candidateId": candidate_id,
                    "stage": stage,
                    "ts": now_ms - (start_days - step) * DAY_MS,
                    "by": rng.choice(RECRUITERS),
                    "note": f"Stage set to {stage}",
                }
            )
    return entries


def build_assessment(rng: random.Random, job_id: Any) -> dict[str, Any]:
    return {
        "jobId": job_id,
        "sections": [
            {
                "id": _rid(rng),
                "title": "Basics",
                "questions": [
                    {
                        "id": _rid(rng),
                        "type": "single",
                        "label": "Are you willing to relocate?",
                        "required": True,
                        "options": ["Yes", "No"],
                    },
                    {"id": _rid(rng), "type": "short", "label": "Current company", "required": False, "maxLength": 60},
                ],
            },
            {
                "id": _rid(rng),
                "title": "Skills",
                "questions": [
                    {
                        "id": _rid(rng),
                        "type": "multi",
                        "label": "Tech you know",
                        "required": True,
                        "options": ["React", "Node", "SQL", "Python", "AWS"],
                    },
                    {
                        "id": _rid(rng),
                        "type": "numeric",
                        "label": "Years of experience",
                        "required": True,
                        "min": 0,
                        "max": 20,
                    },
                    {
                        "id": _rid(rng),
                        "type": "long",
                        "label": "Biggest project you led",
                        "required": False,
                        "maxLength": 500,
                    },
                ],
            },
        ],
    }


def seed_if_empty(
    store: LocalStore,
    *,
    rng: random.Random | None = None,
    job_count: int = 150,
    candidate_count: int = 1050,
    assessment_count: int = 7,
    now_ms: int | None = None,
) -> bool:
    """Populate every table once; returns False when jobs already exist."""
    if store.count("jobs") > 0:
        return False
    rng = rng or random.Random()
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)

    jobs = build_jobs(rng, job_count)
    job_ids = store.bulk_add("jobs", jobs)

    candidates = build_candidates(rng, candidate_count, job_ids=job_ids, jobs=jobs)
    candidate_ids = store.bulk_add("candidates", candidates)

    timelines = build_timelines(rng, candidate_ids=candidate_ids, candidates=candidates, now_ms=now_ms)
    store.bulk_add("timelines", timelines)

    for job_id in job_ids[:assessment_count]:
        store.put("assessments", build_assessment(rng, job_id))

    logger.info(
        "local_store_seeded jobs=%d candidates=%d timelines=%d assessments=%d",
        len(job_ids),
        len(candidate_ids),
        len(timelines),
        min(assessment_count, len(job_ids)),
    )
    return True


def reset_and_reseed(store: LocalStore, *, rng: random.Random | None = None, **kwargs: Any) -> bool:
    store.clear()
    return seed_if_empty(store, rng=rng, **kwargs)
