from pydantic import BaseModel, Field
from typing import Dict, FrozenSet, Optional
from datetime import datetime
from enum import Enum


class EntryStatus(str, Enum):
    """
    Status of a paid contest entry

    - PAID -> SUBMITTED (participant submits the task, may resubmit)
    - SUBMITTED -> WINNER (contest creator picks the entry)
    """
    PAID = "paid"
    SUBMITTED = "submitted"
    WINNER = "winner"


ENTRY_STATUS_TRANSITIONS: Dict[EntryStatus, FrozenSet[EntryStatus]] = {
    EntryStatus.PAID: frozenset({EntryStatus.SUBMITTED}),
    EntryStatus.SUBMITTED: frozenset({EntryStatus.SUBMITTED, EntryStatus.WINNER}),
    EntryStatus.WINNER: frozenset(),
}


class PaymentIntentRequest(BaseModel):
    """Amount to authorize with the payment gateway, in major currency units"""
    price: float = Field(..., gt=0)


class PaymentCreate(BaseModel):
    """Schema for recording a completed entry payment"""
    contestId: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    transactionId: str = Field(..., min_length=1)
    date: Optional[datetime] = None


class TaskSubmission(BaseModel):
    """Participant's task submission (link or text)"""
    taskSubmission: str = Field(..., min_length=1)
