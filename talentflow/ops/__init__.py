from talentflow.ops.parity import check_candidates_parity
from talentflow.ops.parity import check_jobs_parity
from talentflow.ops.parity import compare_list_envelopes

__all__ = [
    "check_candidates_parity",
    "check_jobs_parity",
    "compare_list_envelopes",
]
