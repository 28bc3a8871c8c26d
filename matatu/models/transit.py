from sqlalchemy import Column, Integer, String, Float, ForeignKey
from matatu.db.session import Base

class Stage(Base):
    __tablename__ = "stages"
    stage_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

class Route(Base):
    __tablename__ = "routes"
    route_id = Column(Integer, primary_key=True, autoincrement=True)
    display_name = Column(String(255), nullable=False)

class Sacco(Base):
    __tablename__ = "saccos"
    sacco_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    base_fare_range = Column(String(100), nullable=True)
    route_id = Column(Integer, ForeignKey("routes.route_id", ondelete="SET NULL"), nullable=True)
    sacco_stage_id = Column(Integer, ForeignKey("stages.stage_id", ondelete="SET NULL"), nullable=True)
