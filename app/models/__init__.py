"""
Database models package.
"""

from app.models.user import User, UserRole, FreelancerProfile
from app.models.job import Job, JobCategory, Application
from app.models.gig import Gig, GigStatus
from app.models.order import Order, OrderStatus, OrderStatusHistory

__all__ = [
    "User", "UserRole", "FreelancerProfile",
    "Job", "JobCategory", "Application",
    "Gig", "GigStatus",
    "Order", "OrderStatus", "OrderStatusHistory",
]
