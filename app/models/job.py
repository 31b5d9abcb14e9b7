from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, Text, ForeignKey, JSON, UniqueConstraint, func
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from app.core.database import Base

# List-valued columns: JSONB on PostgreSQL, JSON elsewhere
JSONList = JSON().with_variant(JSONB, "postgresql")


class Job(Base):
    """
    Job posting created by a client.

    Only the poster may change or delete it. Listings show verified jobs only.
    `proposals` counts freelancer views of the job page, not applications.
    """
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    posted_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    budget_min = Column(Float, nullable=True)
    budget_max = Column(Float, nullable=True)
    deadline = Column(DateTime(timezone=True), nullable=True)
    job_difficulty = Column(String, nullable=True)
    project_length = Column(String, nullable=True)
    key_responsibilities = Column(JSONList, nullable=False, default=list)
    required_skills = Column(JSONList, nullable=False, default=list)
    tools = Column(JSONList, nullable=False, default=list)
    scope = Column(Text, nullable=True)

    # Contact details shown on the posting
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    company = Column(String, nullable=True)
    note = Column(Text, nullable=True)
    video_file_url = Column(String, nullable=True)

    proposals = Column(Integer, default=0, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    posted_by = relationship("User", back_populates="jobs")
    categories = relationship(
        "JobCategory",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="JobCategory.position",
    )
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")

    @property
    def category(self):
        return [row.name for row in self.categories]

    @category.setter
    def category(self, names):
        unique_names = list(dict.fromkeys(names or []))
        self.categories = [
            JobCategory(name=name, position=position) for position, name in enumerate(unique_names)
        ]

    def is_owned_by(self, user_id: int) -> bool:
        return self.posted_by_id == user_id

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}')>"


class JobCategory(Base):
    """One category tag of a job. Rows keep category membership filterable in SQL."""
    __tablename__ = "job_categories"

    id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    job = relationship("Job", back_populates="categories")


class Application(Base):
    """
    A freelancer's application to a job.

    The unique constraint is what guarantees one application per
    (freelancer, job); the pre-check in the endpoint only gives a nicer error.
    """
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("freelancer_id", "job_id", name="uq_applications_freelancer_job"),
    )

    id = Column(Integer, primary_key=True, index=True)
    freelancer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    about_freelancer = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    freelancer = relationship("User", back_populates="applications")
    job = relationship("Job", back_populates="applications")

    def __repr__(self):
        return f"<Application(id={self.id}, freelancer_id={self.freelancer_id}, job_id={self.job_id})>"
