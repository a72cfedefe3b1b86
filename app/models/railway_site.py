from sqlalchemy import Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class RailwaySite(Base):
    __tablename__ = "railway_sites"
    __table_args__ = (
        Index("ix_railway_sites_cluster_status", "cluster", "status"),
        Index("ix_railway_sites_lat_lng", "latitude", "longitude"),
    )

    id = Column(String(36), primary_key=True)
    serial_number = Column(Integer, unique=True, nullable=False)
    address = Column(Text, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    sanctioned_load = Column(String(100), nullable=False, default="")
    location_name = Column(String(255), nullable=False, index=True)
    cluster = Column(String(20), nullable=False, index=True)
    zone = Column(String(100), nullable=False, index=True)
    consignee_details = Column(Text, nullable=False)

    # Areas in m², capacity in kW
    rooftop_area = Column(Float, nullable=False)
    feasible_area = Column(Float, nullable=False)
    feasible_capacity = Column(Float, nullable=False, index=True)

    status = Column(String(20), nullable=False, default="planning", index=True)
    # "planning" | "survey" | "design" | "construction" | "operational" | "maintenance"

    # Placeholder figures populated at creation
    energy_generated = Column(Float, nullable=False, default=0)
    efficiency = Column(Float, nullable=False, default=85)
    monthly_energy_target = Column(Float, nullable=False, default=0)
    carbon_offset_kg = Column(Float, nullable=False, default=0)
    maintenance_schedule = Column(String(20), nullable=False, default="quarterly")

    installation_date = Column(DateTime, nullable=True)
    last_maintenance_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
