"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta

import pytest

from jalsuraksha.clock import FrozenClock
from jalsuraksha.database import init_database, make_engine, drop_tables
from jalsuraksha.store import SurveillanceStore

NOW = datetime(2024, 6, 15, 12, 0, 0)


@pytest.fixture
def clock():
    """Clock pinned to NOW."""
    return FrozenClock(NOW)


@pytest.fixture
def memory_store(clock):
    return SurveillanceStore(clock=clock)


@pytest.fixture
def sql_store(clock):
    """Store backed by an in-memory SQLite database."""
    engine = make_engine("sqlite://")
    session_factory = init_database("sqlite://", engine=engine)
    yield SurveillanceStore(backend="sql", session_factory=session_factory, clock=clock)
    drop_tables(engine)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """The same tests run against both storage backends."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def sample_phc():
    """Create a sample PHC payload for testing."""
    return {
        "name": "Guwahati PHC",
        "district": "Kamrup",
        "state": "Assam",
        "latitude": 26.1445,
        "longitude": 91.7362,
        "contactPhone": "+91-98765-43210",
        "adminName": "Dr. Priya Sharma",
    }


@pytest.fixture
def sample_disease_report():
    """Create a sample disease report payload for testing."""
    return {
        "phcId": "PHC001",
        "reportDate": (NOW - timedelta(days=1)).isoformat(),
        "diseaseType": "cholera",
        "caseCount": 4,
        "ageGroup": "0-5",
        "severity": "moderate",
        "symptoms": "watery diarrhea, vomiting",
        "reportedBy": "Nurse Bora",
    }


@pytest.fixture
def sample_water_test():
    """Create a sample water quality test payload for testing."""
    return {
        "phcId": "PHC001",
        "testDate": (NOW - timedelta(days=2)).isoformat(),
        "location": "Ward 4 tube well",
        "source": "hand_pump",
        "phValue": 6.8,
        "turbidity": 4.2,
        "bacteria": 12,
        "chlorine": 0.1,
        "testedBy": "Lab Tech Das",
        "status": "contaminated",
    }


@pytest.fixture
def sample_alert():
    """Create a sample alert payload for testing."""
    return {
        "title": "Cholera cluster in Kamrup",
        "description": "Rising watery diarrhea cases linked to contaminated hand pump",
        "severity": "high",
        "phcId": "PHC001",
        "affectedPopulation": 1200,
        "estimatedCases": 35,
        "confidence": 80,
        "riskFactors": ["contaminated water source", "monsoon flooding"],
    }


@pytest.fixture
def sample_user():
    """Create a sample user payload for testing."""
    return {
        "name": "Dr. Priya Sharma",
        "email": "priya.sharma@jalsuraksha.gov.in",
        "role": "admin",
        "phone": "+91-98765-43210",
    }


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on test names."""
    for item in items:
        # API tests go through the whole stack
        if "api" in item.nodeid.lower() or "integration" in item.name:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
