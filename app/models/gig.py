import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, JSON, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from app.core.database import Base


class GigStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"


class Gig(Base):
    """
    A freelancer's service listing.

    `pricing` maps package tier to price, e.g. {"basic": 100, "standard": 180}.
    Orders snapshot the chosen price, so later pricing edits do not affect them.
    """
    __tablename__ = "gigs"

    id = Column(Integer, primary_key=True, index=True)
    freelancer_id = Column(Integer, ForeignKey("freelancer_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    pricing = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict)
    delivery_time = Column(Integer, nullable=False)  # days
    status = Column(Enum(GigStatus), default=GigStatus.DRAFT, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    freelancer = relationship("FreelancerProfile", back_populates="gigs")
    orders = relationship("Order", back_populates="gig")

    def price_for(self, package: str):
        """Return the price of `package`, or None if the gig does not offer it at a positive price."""
        if not isinstance(self.pricing, dict):
            return None
        price = self.pricing.get(package)
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price <= 0:
            return None
        return price

    def __repr__(self):
        return f"<Gig(id={self.id}, title='{self.title}', status={self.status.value})>"
