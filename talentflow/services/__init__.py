from talentflow.services.assessments import AssessmentsService
from talentflow.services.base import EntityService
from talentflow.services.candidates import CandidatesService
from talentflow.services.jobs import JobsService
from talentflow.services.submissions import SubmissionsService

__all__ = [
    "AssessmentsService",
    "CandidatesService",
    "EntityService",
    "JobsService",
    "SubmissionsService",
]
