"""Estimate lifecycle use cases"""
from .create_estimate import CreateEstimate
from .update_estimate import UpdateEstimate
from .mark_estimate_sent import MarkEstimateSent
from .sign_estimate import SignEstimate
from .reject_estimate import RejectEstimate
from .delete_estimate import DeleteEstimate
from .get_estimate import GetEstimate
from .list_estimates import ListEstimates
from .dtos import (
    CreateEstimateInput,
    UpdateEstimateInput,
    SignEstimateCommand,
    RejectEstimateCommand,
    EstimateResponseDTO,
    ListEstimatesResponseDTO,
    PublicEstimateView,
)

__all__ = [
    "CreateEstimate",
    "UpdateEstimate",
    "MarkEstimateSent",
    "SignEstimate",
    "RejectEstimate",
    "DeleteEstimate",
    "GetEstimate",
    "ListEstimates",
    "CreateEstimateInput",
    "UpdateEstimateInput",
    "SignEstimateCommand",
    "RejectEstimateCommand",
    "EstimateResponseDTO",
    "ListEstimatesResponseDTO",
    "PublicEstimateView",
]
