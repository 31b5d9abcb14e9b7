"""
CRUD operations for Job and Application models.

Implements the Repository pattern to encapsulate all database operations
for jobs, providing a clean interface for the API layer.
"""

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import or_, update as sql_update
from sqlalchemy.orm import Session, joinedload, selectinload

from app.crud.pagination import paginate
from app.models.job import Job, JobCategory, Application

NEWEST_FIRST = (Job.created_at.desc(), Job.id.desc())
LIST_OPTIONS = (joinedload(Job.posted_by), selectinload(Job.categories))


def create(db: Session, posted_by_id: int, fields: Dict[str, Any]) -> Job:
    """
    Create a new job owned by `posted_by_id`.

    Args:
        db: Database session
        posted_by_id: Id of the posting client
        fields: Validated column values (category as a list of names)

    Returns:
        Created Job instance with id
    """
    fields = dict(fields)
    categories = fields.pop("category", None) or []

    db_job = Job(posted_by_id=posted_by_id, **fields)
    db_job.category = categories

    db.add(db_job)
    db.commit()
    db.refresh(db_job)

    return db_job


def get_by_id(db: Session, job_id: int) -> Optional[Job]:
    """
    Retrieve a job by its ID, with poster and categories loaded.

    Returns:
        Job instance if found, None otherwise
    """
    return (
        db.query(Job)
        .options(*LIST_OPTIONS)
        .filter(Job.id == job_id)
        .first()
    )


def update(db: Session, job: Job, values: Dict[str, Any]) -> Job:
    """
    Apply already-validated column values to a job.

    Returns:
        Updated Job instance
    """
    for key, value in values.items():
        setattr(job, key, value)

    db.commit()
    db.refresh(job)

    return job


def delete(db: Session, job: Job) -> None:
    """Hard-delete a job; its applications and categories go with it."""
    db.delete(job)
    db.commit()


def increment_proposals(db: Session, job_id: int) -> None:
    """Atomically add one to the job's proposal counter."""
    db.execute(
        sql_update(Job)
        .where(Job.id == job_id)
        .values(proposals=Job.proposals + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()


def get_for_client(db: Session, posted_by_id: int, page: int, limit: int) -> Tuple[List[Job], int]:
    """Jobs posted by one client, newest first."""
    query = db.query(Job).filter(Job.posted_by_id == posted_by_id)
    return paginate(query, page, limit, order_by=NEWEST_FIRST, options=LIST_OPTIONS)


def get_verified(
    db: Session,
    page: int,
    limit: int,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> Tuple[List[Job], int]:
    """
    Public job board: verified jobs only.

    Args:
        search: Case-insensitive substring matched against title, description and scope
        category: Only jobs tagged with this category
    """
    query = db.query(Job).filter(Job.is_verified.is_(True))

    if category:
        query = query.filter(Job.categories.any(JobCategory.name == category))

    if search:
        # % and _ in the search text match literally
        query = query.filter(
            or_(
                Job.title.icontains(search, autoescape=True),
                Job.description.icontains(search, autoescape=True),
                Job.scope.icontains(search, autoescape=True),
            )
        )

    return paginate(query, page, limit, order_by=NEWEST_FIRST, options=LIST_OPTIONS)


def get_application(db: Session, freelancer_id: int, job_id: int) -> Optional[Application]:
    return (
        db.query(Application)
        .filter(Application.freelancer_id == freelancer_id, Application.job_id == job_id)
        .first()
    )


def create_application(
    db: Session,
    freelancer_id: int,
    job_id: int,
    about_freelancer: Optional[str] = None,
) -> Application:
    """
    Record an application.

    A single insert and commit; the unique constraint on (freelancer_id, job_id)
    makes a concurrent duplicate fail with IntegrityError at commit.
    """
    application = Application(
        freelancer_id=freelancer_id,
        job_id=job_id,
        about_freelancer=about_freelancer,
    )

    db.add(application)
    db.commit()
    db.refresh(application)

    return application


def get_applied_job_ids(db: Session, freelancer_id: int) -> List[int]:
    """Ids of jobs the freelancer applied to, newest application first."""
    rows = (
        db.query(Application.job_id)
        .filter(Application.freelancer_id == freelancer_id)
        .order_by(Application.id.desc())
        .all()
    )
    return [job_id for (job_id,) in rows]
