from sqlalchemy import Column, Date, DateTime, Float, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from app.core.database import Base


class EnergyProduction(Base):
    __tablename__ = "energy_production"
    __table_args__ = (
        UniqueConstraint("site_id", "date", name="uq_energy_production_site_date"),
    )

    id = Column(String(36), primary_key=True)
    # No foreign key: rows outlive their site until cleaned up explicitly
    site_id = Column(String(36), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    start_hour = Column(Integer, nullable=True)
    end_hour = Column(Integer, nullable=True)
    energy_produced = Column(Float, nullable=False)  # kWh
    peak_output = Column(Float, nullable=False)  # kW
    sun_hours = Column(Float, nullable=False)
    weather_conditions = Column(String(20), nullable=False, index=True)
    temperature = Column(Float, nullable=True)  # Celsius
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
