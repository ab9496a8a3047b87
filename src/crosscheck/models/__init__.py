# Copyright (c) Syntropy Systems
"""Serializable records of experiment results."""

from crosscheck.models.base import CrosscheckBaseModel
from crosscheck.models.result import (
    ObservationRecord,
    OperationErrorRecord,
    ResultRecord,
)

__all__ = [
    "CrosscheckBaseModel",
    "ObservationRecord",
    "OperationErrorRecord",
    "ResultRecord",
]
