from fastapi import APIRouter, Depends

from app.database import Database, get_database
from app.models.auth.user import normalize_email
from app.models.payment.payment import TaskSubmission
from app.routes.auth.dependencies import authorize
from app.services.auth.policy import Caller
from app.services.contest.contest import ContestService
from app.services.contest.submission import SubmissionService
from app.services.payment.payment_service import PaymentService
from app.utils.response import success_response, write_result_to_json
from app.utils.serializers import serialize_documents

router = APIRouter(tags=["Submissions"])


async def _submit(payment_id: str, submission: TaskSubmission, caller: Caller, db: Database):
    payment = await PaymentService(db).get_payment(payment_id)
    caller.ensure_owner(payment)

    result = await SubmissionService(db).submit_task(payment, submission.taskSubmission)

    return success_response(
        message="Task submitted successfully",
        data=write_result_to_json(result)
    )


@router.put("/contest/submit/{payment_id}")
async def submit_task(
    payment_id: str,
    submission: TaskSubmission,
    caller: Caller = Depends(authorize("submissions:submit")),
    db: Database = Depends(get_database)
):
    """
    Submit the task for a paid entry (entry owner only).

    Resubmitting replaces the previous submission until a winner is picked.
    """
    return await _submit(payment_id, submission, caller, db)


@router.patch("/payments/submit-task/{payment_id}")
async def submit_task_for_payment(
    payment_id: str,
    submission: TaskSubmission,
    caller: Caller = Depends(authorize("submissions:submit")),
    db: Database = Depends(get_database)
):
    """Same as ``PUT /contest/submit/{payment_id}``."""
    return await _submit(payment_id, submission, caller, db)


@router.get("/contest/submissions/{contest_id}")
async def get_contest_submissions(
    contest_id: str,
    caller: Caller = Depends(authorize("submissions:list_for_contest")),
    db: Database = Depends(get_database)
):
    """Submitted entries of one contest (contest owner or admin)."""
    contest = await ContestService(db).get_contest(contest_id)
    caller.ensure_owner(contest)

    submissions = await SubmissionService(db).get_contest_submissions(str(contest["_id"]))

    return success_response(
        message="Submissions retrieved successfully",
        data={"submissions": serialize_documents(submissions)}
    )


@router.get("/submissions/creator/{email}")
async def get_creator_submissions(
    email: str,
    caller: Caller = Depends(authorize("submissions:list_for_creator")),
    db: Database = Depends(get_database)
):
    """Submitted entries across all of the caller's contests."""
    submissions = await SubmissionService(db).get_creator_submissions(normalize_email(email))

    return success_response(
        message="Submissions retrieved successfully",
        data={"submissions": serialize_documents(submissions)}
    )


@router.patch("/contest/winner/{payment_id}")
async def mark_winner(
    payment_id: str,
    caller: Caller = Depends(authorize("submissions:mark_winner")),
    db: Database = Depends(get_database)
):
    """
    Pick a submitted entry as the contest winner (contest owner or admin).

    Sets the entry status to ``winner`` and copies the participant's
    name and photo onto the contest.
    """
    submission_service = SubmissionService(db)
    payment = await PaymentService(db).get_payment(payment_id)
    contest = await submission_service.get_entry_contest(payment)
    caller.ensure_owner(contest)

    result = await submission_service.mark_winner(payment, contest)

    return success_response(
        message="Winner selected successfully",
        data=write_result_to_json(result)
    )
