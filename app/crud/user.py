"""
Read-only lookups for users, freelancer profiles and gigs.

These rows are owned by other services; this API never writes them.
"""

from typing import Optional
from sqlalchemy.orm import Session

from app.models.gig import Gig
from app.models.user import FreelancerProfile


def get_freelancer_profile(db: Session, user_id: int) -> Optional[FreelancerProfile]:
    return db.query(FreelancerProfile).filter(FreelancerProfile.user_id == user_id).first()


def get_gig(db: Session, gig_id: int) -> Optional[Gig]:
    return db.query(Gig).filter(Gig.id == gig_id).first()
