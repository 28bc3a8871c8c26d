from sqlalchemy import Column, Integer, String, Text, Date, DateTime
from matatu.db.session import Base
from matatu.utils.clock import utcnow

class LostItem(Base):
    __tablename__ = "lost_items"
    id = Column(Integer, primary_key=True, autoincrement=True)
    lostitem = Column(String(255), nullable=False)
    route = Column(String(255), nullable=False)
    date = Column(Date, nullable=False)
    sacco = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)  # /uploads/<name>
    created_at = Column(DateTime, nullable=False, default=utcnow)
