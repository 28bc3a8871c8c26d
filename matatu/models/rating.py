from sqlalchemy import Column, Integer, Float, Text, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from matatu.db.session import Base
from matatu.utils.clock import utcnow

class Rating(Base):
    __tablename__ = "ratings"
    id = Column(Integer, primary_key=True, autoincrement=True)
    commuter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    sacco_id = Column(Integer, ForeignKey("saccos.sacco_id", ondelete="CASCADE"), nullable=False, index=True)
    cleanliness_rating = Column(Integer, nullable=False)
    safety_rating = Column(Integer, nullable=False)
    service_rating = Column(Integer, nullable=False)
    # recomputed by the service on every write
    average_rating = Column(Float, nullable=False)
    review_text = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("commuter_id", "sacco_id", name="uq_ratings_commuter_sacco"),
        CheckConstraint("cleanliness_rating BETWEEN 1 AND 5", name="ck_ratings_cleanliness"),
        CheckConstraint("safety_rating BETWEEN 1 AND 5", name="ck_ratings_safety"),
        CheckConstraint("service_rating BETWEEN 1 AND 5", name="ck_ratings_service"),
    )
