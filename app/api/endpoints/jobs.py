"""
API endpoints for job postings and applications.

Clients post and manage jobs; freelancers browse verified jobs and apply.
Ownership failures answer 404, the same as a missing job, so job ids owned
by other clients cannot be probed.
"""

import logging
import time
from datetime import datetime
from typing import List, Optional, Tuple
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_current_user, get_current_freelancer, get_optional_user
from app.core.exceptions import ApiError, DuplicateError, InternalError, NotFoundError, ValidationError
from app.core.storage import StorageError, storage
from app.crud import job as job_crud
from app.crud import user as user_crud
from app.models.user import User, UserRole
from app.schemas.common import ApiResponse, Page
from app.schemas.job import (
    AppliedJobsResponse,
    ApplicationStatusResponse,
    ApplyJobRequest,
    ApplyJobResponse,
    ApplicationResponse,
    JobCreateRequest,
    JobDetailResponse,
    JobResponse,
    JobUpdateRequest,
)
from app.services import job_rules

router = APIRouter(prefix="/jobs", tags=["Jobs"])
logger = logging.getLogger(__name__)

OWNERSHIP_NOT_FOUND = "Job not found or you don't own it"


def _video_key(user_id: int, filename: str) -> str:
    return f"jobs/{user_id}/{int(time.time() * 1000)}-{filename}"


def _upload_video(user_id: int, video_file: UploadFile) -> Tuple[str, str]:
    """Validate and store a job video, returning (storage key, URL)."""
    if not (video_file.content_type or "").startswith("video/"):
        raise ValidationError("Invalid file type. Only videos are allowed")

    key = _video_key(user_id, video_file.filename)
    try:
        url = storage.upload_file(video_file.file, key, video_file.content_type)
    except StorageError as e:
        logger.error(f"Failed to upload job video {key}: {e}")
        raise InternalError("Failed to upload video", error=str(e))

    logger.info(f"Uploaded job video to {url}")
    return key, url


def _get_owned_job(db: Session, job_id: int, user: User):
    job = job_crud.get_by_id(db, job_id)
    if not job or not job.is_owned_by(user.id):
        raise NotFoundError(OWNERSHIP_NOT_FOUND)
    return job


@router.post("/", status_code=201, response_model=ApiResponse[JobResponse])
def create_job(
    title: str = Form(...),
    description: str = Form(...),
    category: Optional[List[str]] = Form(None),
    budget_min: Optional[float] = Form(None, alias="budgetMin"),
    budget_max: Optional[float] = Form(None, alias="budgetMax"),
    deadline: Optional[datetime] = Form(None),
    job_difficulty: Optional[str] = Form(None, alias="jobDifficulty"),
    project_length: Optional[str] = Form(None, alias="projectLength"),
    key_responsibilities: Optional[List[str]] = Form(None, alias="keyResponsibilities"),
    required_skills: Optional[List[str]] = Form(None, alias="requiredSkills"),
    tools: Optional[List[str]] = Form(None),
    scope: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    company: Optional[str] = Form(None),
    note: Optional[str] = Form(None),
    video_file_url: Optional[str] = Form(None, alias="videoFileUrl"),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Post a new job.

    Accepts multipart form data. An optional `videoFile` must have a video/*
    content type; it is uploaded to storage and its URL saved on the job.
    Without a file, `videoFileUrl` is stored as given.
    """
    try:
        request = JobCreateRequest(
            title=title,
            description=description,
            category=category,
            budget_min=budget_min,
            budget_max=budget_max,
            deadline=deadline,
            job_difficulty=job_difficulty,
            project_length=project_length,
            key_responsibilities=key_responsibilities,
            required_skills=required_skills,
            tools=tools,
            scope=scope,
            name=name,
            email=email,
            company=company,
            note=note,
            video_file_url=video_file_url,
        )
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid job data: {e.errors()[0]['msg']}")

    fields = job_rules.validate_new_job(request.model_dump())

    uploaded_key = None
    if video_file is not None and video_file.filename:
        uploaded_key, fields["video_file_url"] = _upload_video(user.id, video_file)

    try:
        new_job = job_crud.create(db, user.id, fields)
        logger.info(f"Created job {new_job.id}: {new_job.title} (posted by {user.id})")

        return ApiResponse[JobResponse](
            status_code=201,
            data=JobResponse.model_validate(new_job),
            message="Job posted successfully"
        )

    except Exception as e:
        db.rollback()
        if uploaded_key:
            try:
                storage.delete_file(uploaded_key)
            except Exception as cleanup_error:
                logger.error(f"Failed to clean up video after database error: {cleanup_error}")
        logger.error(f"Error creating job: {e}")
        raise InternalError("Failed to post job", error=str(e))


@router.get("/", response_model=ApiResponse[Page[JobResponse]])
def list_jobs(
    search: Optional[str] = None,
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db)
):
    """
    Public job board: verified jobs, newest first.

    Args:
        search: Case-insensitive text matched against title, description and scope
        category: Only jobs tagged with this category
    """
    try:
        jobs, total = job_crud.get_verified(db, page, limit, search=search, category=category)
        return ApiResponse[Page[JobResponse]](
            status_code=200,
            data=Page[JobResponse].build([JobResponse.model_validate(j) for j in jobs], total, page, limit),
            message="All jobs retrieved successfully"
        )
    except Exception as e:
        logger.error(f"Error retrieving all jobs: {e}")
        raise InternalError("Failed to retrieve all jobs", error=str(e))


@router.get("/client", response_model=ApiResponse[Page[JobResponse]])
def list_client_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Jobs posted by the current user, verified or not."""
    try:
        jobs, total = job_crud.get_for_client(db, user.id, page, limit)
        return ApiResponse[Page[JobResponse]](
            status_code=200,
            data=Page[JobResponse].build([JobResponse.model_validate(j) for j in jobs], total, page, limit),
            message="Client jobs retrieved successfully"
        )
    except Exception as e:
        logger.error(f"Error retrieving client jobs: {e}")
        raise InternalError("Failed to retrieve client jobs", error=str(e))


@router.get("/applied", response_model=ApiResponse[AppliedJobsResponse])
def list_applied_jobs(
    user: User = Depends(get_current_freelancer),
    db: Session = Depends(get_db)
):
    """Ids of the jobs the current freelancer has applied to."""
    try:
        job_ids = job_crud.get_applied_job_ids(db, user.id)
    except Exception as e:
        logger.error(f"Error retrieving applied jobs: {e}")
        raise InternalError("Failed to retrieve applied jobs", error=str(e))

    return ApiResponse[AppliedJobsResponse](
        status_code=200,
        data=AppliedJobsResponse(job_ids=job_ids),
        message="Applied jobs retrieved successfully"
    )


@router.get("/{job_id}", response_model=ApiResponse[JobDetailResponse])
def get_job(
    job_id: int,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """
    Retrieve a job by ID.

    A view by a signed-in freelancer other than the poster adds one to the
    job's `proposals` counter before the response is sent, so the returned
    count includes this view.
    """
    try:
        job = job_crud.get_by_id(db, job_id)
        if not job:
            raise NotFoundError("Job not found")

        if user is not None and user.role == UserRole.FREELANCER and not job.is_owned_by(user.id):
            job_crud.increment_proposals(db, job.id)

        return ApiResponse[JobDetailResponse](
            status_code=200,
            data=JobDetailResponse.model_validate(job),
            message="Job retrieved successfully"
        )

    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error retrieving job {job_id}: {e}")
        raise InternalError("Failed to retrieve job", error=str(e))


@router.put("/{job_id}", response_model=ApiResponse[JobResponse])
@router.patch("/{job_id}", response_model=ApiResponse[JobResponse])
def update_job(
    job_id: int,
    request: JobUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update a job. Only fields present in the body change.

    List fields accept a single value or a list. `budgetMax` is checked
    against the new `budgetMin` when both are sent, else the stored one.
    """
    try:
        job = _get_owned_job(db, job_id, user)
        values = job_rules.build_job_update(job, request.model_dump(exclude_unset=True))

        updated_job = job_crud.update(db, job, values)
        logger.info(f"Updated job {job_id}: {sorted(values)}")

        return ApiResponse[JobResponse](
            status_code=200,
            data=JobResponse.model_validate(updated_job),
            message="Job updated successfully"
        )

    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating job {job_id}: {e}")
        raise InternalError("Failed to update job", error=str(e))


@router.delete("/{job_id}", response_model=ApiResponse[None])
def delete_job(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a job owned by the current user.
    """
    try:
        job = _get_owned_job(db, job_id, user)
        job_crud.delete(db, job)
        logger.info(f"Deleted job {job_id}")

        return ApiResponse[None](status_code=200, data=None, message="Job deleted successfully")

    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting job {job_id}: {e}")
        raise InternalError("Failed to delete job", error=str(e))


@router.post("/{job_id}/apply", response_model=ApiResponse[ApplyJobResponse])
def apply_job(
    job_id: int,
    request: Optional[ApplyJobRequest] = None,
    user: User = Depends(get_current_freelancer),
    db: Session = Depends(get_db)
):
    """
    Apply to a job as the current freelancer.

    Requires a freelancer profile. A second application to the same job is
    rejected; the database constraint also catches concurrent duplicates.
    """
    about = request.about_freelancer if request else None

    try:
        job = job_crud.get_by_id(db, job_id)
        if not job:
            raise NotFoundError("Job not found")

        if not user_crud.get_freelancer_profile(db, user.id):
            raise NotFoundError("Freelancer profile not found")

        if job_crud.get_application(db, user.id, job_id):
            raise DuplicateError("You have already applied to this job")

        try:
            application = job_crud.create_application(db, user.id, job_id, about)
        except IntegrityError:
            db.rollback()
            raise DuplicateError("You have already applied to this job")

        logger.info(f"Freelancer {user.id} applied to job {job_id}")

        return ApiResponse[ApplyJobResponse](
            status_code=200,
            data=ApplyJobResponse(applied_job=ApplicationResponse.model_validate(application)),
            message="Applied to job successfully"
        )

    except ApiError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Error applying for job {job_id}: {e}")
        raise InternalError(f"Failed to apply for job: {e}", error=str(e))


@router.get("/{job_id}/application-status", response_model=ApiResponse[ApplicationStatusResponse])
def check_application_status(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Whether the current user has applied to the job."""
    try:
        application = job_crud.get_application(db, user.id, job_id)
    except Exception as e:
        logger.error(f"Error in check_application_status: {e}")
        raise InternalError("Failed to check application status", error=str(e))

    return ApiResponse[ApplicationStatusResponse](
        status_code=200,
        data=ApplicationStatusResponse(has_applied=application is not None),
        message="Application status retrieved"
    )
