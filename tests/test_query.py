from __future__ import annotations

import pytest

from talentflow.errors import InvalidIdError
from talentflow.query import (
    CandidateListQuery,
    JobListQuery,
    coerce_id,
    filter_candidates,
    filter_jobs,
    list_candidates_envelope,
    list_jobs_envelope,
    normalize_stage,
    paginate,
)

JOBS = [
    {"id": 1, "title": "Zeta Engineer", "slug": "zeta", "status": "active", "order": 2, "company": "Globex"},
    {"id": 2, "title": "alpha Designer", "slug": "alpha", "status": "archived", "order": 0, "role": "UI/UX Designer"},
    {"id": 3, "title": "Beta Analyst", "slug": "beta", "status": "active", "order": 1, "company": "Hooli"},
]


def test_normalize_stage_falls_back_to_applied():
    assert normalize_stage(" Screen ") == "screen"
    assert normalize_stage("HIRED") == "hired"
    assert normalize_stage("interview") == "applied"
    assert normalize_stage(None) == "applied"


@pytest.mark.parametrize("raw,expected", [(7, 7), ("7", 7), (" 12 ", 12), (4.0, 4), ("3.0", 3)])
def test_coerce_id_accepts_integral_values(raw, expected):
    assert coerce_id(raw, entity="job") == expected


@pytest.mark.parametrize("raw", ["abc", "", "7.5", 7.5, None, True, float("nan"), "inf"])
def test_coerce_id_rejects_everything_else(raw):
    with pytest.raises(InvalidIdError) as exc_info:
        coerce_id(raw, entity="candidate")
    assert exc_info.value.code == "INVALID_ID"
    assert exc_info.value.http_status == 400


def test_job_query_clamps_and_normalizes_inputs():
    query = JobListQuery(search="  Engineer ", status=" active ", page=0, pageSize="abc", sort="salary")

    assert query.search == "Engineer"
    assert query.needle == "engineer"
    assert query.status == "active"
    assert query.page == 1
    assert query.page_size == 12
    assert query.sort == "order"


def test_job_query_accepts_field_name_and_alias():
    assert JobListQuery(page_size=5).page_size == 5
    assert JobListQuery(pageSize=7).page_size == 7
    assert JobListQuery(page_size=-3).page_size == 12


def test_query_params_use_wire_names():
    assert JobListQuery(search="qa", page=2, page_size=10, sort="title").to_params() == {
        "search": "qa",
        "page": 2,
        "pageSize": 10,
        "status": "",
        "sort": "title",
    }
    assert CandidateListQuery(stage="Tech").to_params() == {"search": "", "page": 1, "pageSize": 50, "stage": "tech"}


def test_filter_jobs_searches_title_slug_company_and_role():
    assert [row["id"] for row in filter_jobs(JOBS, JobListQuery(search="hooli"))] == [3]
    assert [row["id"] for row in filter_jobs(JOBS, JobListQuery(search="ui/ux"))] == [2]
    assert [row["id"] for row in filter_jobs(JOBS, JobListQuery(search="ZETA"))] == [1]
    assert [row["id"] for row in filter_jobs(JOBS, JobListQuery(status="active"))] == [1, 3]


def test_job_status_filter_is_an_exact_match():
    assert JobListQuery(status=" Archived ").status == "Archived"
    assert filter_jobs(JOBS, JobListQuery(status="Active")) == []
    assert [row["id"] for row in filter_jobs(JOBS, JobListQuery(status="archived"))] == [2]


def test_job_sorts_by_order_title_and_status():
    by_order = list_jobs_envelope(JOBS, JobListQuery())
    by_title = list_jobs_envelope(JOBS, JobListQuery(sort="title"))
    by_status = list_jobs_envelope(JOBS, JobListQuery(sort="status"))

    assert [row["id"] for row in by_order["items"]] == [2, 3, 1]
    assert [row["id"] for row in by_title["items"]] == [2, 3, 1]
    assert [row["id"] for row in by_status["items"]] == [1, 3, 2]


def test_paginate_past_the_end_keeps_total():
    envelope = paginate([{"id": n} for n in range(5)], page=3, page_size=2)
    assert envelope == {"items": [{"id": 4}], "total": 5, "page": 3, "pageSize": 2}
    assert paginate([{"id": 1}], page=4, page_size=2)["items"] == []


def test_candidate_filter_and_name_sort():
    rows = [
        {"id": 1, "name": "zoe Park", "email": "zoe@mail.com", "stage": "tech"},
        {"id": 2, "name": "Adam West", "email": "adam.park@mail.com", "stage": "Tech"},
        {"id": 3, "name": "mina Ito", "email": "mina@mail.com", "stage": "screen"},
    ]

    assert [row["id"] for row in filter_candidates(rows, CandidateListQuery(search="park"))] == [1, 2]
    assert [row["id"] for row in filter_candidates(rows, CandidateListQuery(stage="tech"))] == [1, 2]

    envelope = list_candidates_envelope(rows, CandidateListQuery(page_size=2))
    assert [row["name"] for row in envelope["items"]] == ["Adam West", "mina Ito"]
    assert envelope["total"] == 3
