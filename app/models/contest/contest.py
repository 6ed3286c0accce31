from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Dict, FrozenSet, Optional
from enum import Enum


class ContestStatus(str, Enum):
    """
    Contest moderation status - State Machine

    State Transitions:
    - PENDING -> ACCEPTED (admin approves, contest becomes public)
    - PENDING -> REJECTED (admin rejects)

    ACCEPTED and REJECTED are final.
    """
    PENDING = "pending"  # Created by a creator, waiting for moderation
    ACCEPTED = "accepted"  # Visible in public listings, open for entries
    REJECTED = "rejected"  # Hidden from public listings


CONTEST_STATUS_TRANSITIONS: Dict[ContestStatus, FrozenSet[ContestStatus]] = {
    ContestStatus.PENDING: frozenset({ContestStatus.ACCEPTED, ContestStatus.REJECTED}),
    ContestStatus.ACCEPTED: frozenset(),
    ContestStatus.REJECTED: frozenset(),
}


def can_transition(current: ContestStatus, target: ContestStatus) -> bool:
    """True when moderation may move a contest from ``current`` to ``target``"""
    return target in CONTEST_STATUS_TRANSITIONS.get(current, frozenset())


class ContestCreate(BaseModel):
    """Schema for creating a contest; unknown display fields are stored as sent"""
    model_config = ConfigDict(extra="allow")

    contestName: str = Field(..., min_length=1, max_length=200)
    contestType: str = Field(..., min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    price: float = Field(0, ge=0)
    prizeMoney: float = Field(0, ge=0)
    taskInstruction: Optional[str] = None
    deadline: Optional[str] = None
    creatorName: Optional[str] = None
    creatorPhoto: Optional[str] = None


class ContestUpdate(BaseModel):
    """Schema for creator edits; only the whitelisted fields are accepted"""
    contestName: Optional[str] = Field(None, min_length=1, max_length=200)
    image: Optional[str] = None
    contestType: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    prizeMoney: Optional[float] = Field(None, ge=0)
    taskInstruction: Optional[str] = None
    deadline: Optional[str] = None


class ContestStatusUpdate(BaseModel):
    """Schema for admin moderation; unknown status strings fail validation"""
    status: ContestStatus


class WinnerSelection(BaseModel):
    """Schema for a creator declaring a contest winner directly"""
    winnerEmail: EmailStr
    winnerName: Optional[str] = None
    winnerPhoto: Optional[str] = None
    paymentId: Optional[str] = Field(
        None,
        description="Entry to flag as the winning one (must belong to this contest)"
    )
