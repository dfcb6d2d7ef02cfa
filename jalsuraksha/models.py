"""
SQLAlchemy models for the surveillance store.

PHC references are plain indexed columns rather than foreign keys: reports,
tests, alerts and users point at a PHC but never own it, and deleting a PHC
leaves them in place.
"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float, Text, JSON

from jalsuraksha.database import Base


class PHC(Base):
    __tablename__ = "phcs"

    id = Column(String(36), primary_key=True)
    name = Column(Text, nullable=False)
    district = Column(Text, nullable=False, index=True)
    state = Column(Text, nullable=False, index=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    contact_phone = Column(Text)
    admin_name = Column(Text)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(DateTime, nullable=False)


class DiseaseReport(Base):
    __tablename__ = "disease_reports"

    id = Column(String(36), primary_key=True)
    phc_id = Column(String(36), nullable=False, index=True)
    report_date = Column(DateTime, nullable=False, index=True)
    disease_type = Column(String(30), nullable=False)
    case_count = Column(Integer, nullable=False)
    age_group = Column(String(10), nullable=False)
    severity = Column(String(20), nullable=False)
    symptoms = Column(Text)
    notes = Column(Text)
    reported_by = Column(Text, nullable=False)
    verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)


class WaterQualityTest(Base):
    __tablename__ = "water_quality_tests"

    id = Column(String(36), primary_key=True)
    phc_id = Column(String(36), nullable=False, index=True)
    test_date = Column(DateTime, nullable=False, index=True)
    location = Column(Text, nullable=False)
    source = Column(String(30), nullable=False)
    ph_value = Column(Float)
    turbidity = Column(Float)
    bacteria = Column(Float)  # E. coli count
    chlorine = Column(Float)
    notes = Column(Text)
    tested_by = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    created_at = Column(DateTime, nullable=False)


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(String(36), primary_key=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    severity = Column(String(20), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    phc_id = Column(String(36), nullable=False, index=True)
    affected_population = Column(Integer, nullable=False)
    estimated_cases = Column(Integer, nullable=False)
    confidence = Column(Integer, nullable=False)
    risk_factors = Column(JSON, nullable=False, default=list)
    alerted_at = Column(DateTime, nullable=False, index=True)
    verified_at = Column(DateTime)
    verified_by = Column(Text)
    resolved_at = Column(DateTime)
    resolved_by = Column(Text)
    created_at = Column(DateTime, nullable=False)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False)
    phc_id = Column(String(36), index=True)
    language = Column(String(5), nullable=False, default="en")
    phone = Column(Text)
    created_at = Column(DateTime, nullable=False)
