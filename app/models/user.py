"""
User and freelancer profile models.

Accounts are created by the shared auth service; this API reads them to
authorize requests and to resolve the freelancer side of jobs and orders.
"""

import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, ForeignKey, Text, func
from sqlalchemy.orm import relationship
from app.core.database import Base


class UserRole(str, enum.Enum):
    FREELANCER = "FREELANCER"
    CLIENT = "CLIENT"
    ADMIN = "ADMIN"


class User(Base):
    """
    Marketplace account.

    Clients post jobs and place orders; freelancers apply to jobs and fulfil
    orders through their FreelancerProfile.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firstname = Column(String, nullable=False)
    lastname = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.CLIENT, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    freelancer_profile = relationship("FreelancerProfile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    jobs = relationship("Job", back_populates="posted_by", cascade="all, delete-orphan")
    applications = relationship(
        "Application",
        back_populates="freelancer",
        cascade="all, delete-orphan",
        order_by="Application.id.desc()",
    )

    @property
    def applied_job_ids(self):
        """Jobs this user has applied to, newest application first."""
        return [application.job_id for application in self.applications]

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role.value})>"


class FreelancerProfile(Base):
    """Seller-side profile. Gigs and orders reference the profile, not the user."""
    __tablename__ = "freelancer_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    title = Column(String, nullable=True)
    bio = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="freelancer_profile")
    gigs = relationship("Gig", back_populates="freelancer", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="freelancer")

    def __repr__(self):
        return f"<FreelancerProfile(id={self.id}, user_id={self.user_id})>"
