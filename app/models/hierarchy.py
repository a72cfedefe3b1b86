from sqlalchemy import JSON, Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class Zone(Base):
    __tablename__ = "zones"
    __table_args__ = (Index("ix_zones_region_status", "region", "status"),)

    id = Column(String(36), primary_key=True)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    region = Column(String(100), nullable=True, index=True)
    head_office = Column(String(255), nullable=True)
    established_year = Column(Integer, nullable=True)
    contact_person = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="active", index=True)

    # Maintained by the hierarchy service as children come and go
    total_divisions = Column(Integer, nullable=False, default=0)
    total_stations = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class Division(Base):
    __tablename__ = "divisions"
    __table_args__ = (Index("ix_divisions_zone_status", "zone_id", "status"),)

    id = Column(String(36), primary_key=True)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    # Zone code and name are copied in so listings need no join
    zone_id = Column(String(36), nullable=False, index=True)
    zone_code = Column(String(20), nullable=False, index=True)
    zone_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    headquarter = Column(String(255), nullable=True)
    established_year = Column(Integer, nullable=True)
    area = Column(Float, nullable=True)  # km²
    division_type = Column(String(20), nullable=False, default="mixed")
    contact_person = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    annual_budget = Column(Float, nullable=True)
    budget_currency = Column(String(3), nullable=False, default="INR")

    total_stations = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class Station(Base):
    __tablename__ = "stations"
    __table_args__ = (Index("ix_stations_division_status", "division_id", "status"),)

    id = Column(String(36), primary_key=True)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    division_id = Column(String(36), nullable=False, index=True)
    division_code = Column(String(20), nullable=False)
    division_name = Column(String(255), nullable=False)
    zone_id = Column(String(36), nullable=False, index=True)
    zone_code = Column(String(20), nullable=False, index=True)
    zone_name = Column(String(255), nullable=False)
    station_type = Column(String(20), nullable=False, default="minor", index=True)
    category = Column(String(2), nullable=False, default="D", index=True)
    address = Column(Text, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    platforms = Column(Integer, nullable=True)
    tracks = Column(Integer, nullable=True)
    amenities = Column(JSON, nullable=False, default=list)
    contact_person = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="operational", index=True)

    # Areas in m²
    rooftop_area = Column(Float, nullable=True)
    land_area = Column(Float, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
