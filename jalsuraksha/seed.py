"""
Sample PHCs for Northeast India and a default administrator.
"""

import logging

logger = logging.getLogger(__name__)

SAMPLE_PHCS = [
    {
        "name": "Guwahati PHC",
        "district": "Kamrup",
        "state": "Assam",
        "latitude": 26.1445,
        "longitude": 91.7362,
        "contact_phone": "+91-98765-43210",
        "admin_name": "Dr. Priya Sharma",
    },
    {
        "name": "Silchar PHC",
        "district": "Cachar",
        "state": "Assam",
        "latitude": 24.8333,
        "longitude": 92.7789,
        "contact_phone": "+91-98765-43211",
        "admin_name": "Dr. Raj Kumar",
    },
    {
        "name": "Imphal PHC",
        "district": "Imphal West",
        "state": "Manipur",
        "latitude": 24.8170,
        "longitude": 93.9368,
        "contact_phone": "+91-98765-43212",
        "admin_name": "Dr. Anita Singh",
    },
    {
        "name": "Shillong PHC",
        "district": "East Khasi Hills",
        "state": "Meghalaya",
        "latitude": 25.5788,
        "longitude": 91.8933,
        "contact_phone": "+91-98765-43213",
        "admin_name": "Dr. John Marbaniang",
    },
    {
        "name": "Agartala PHC",
        "district": "West Tripura",
        "state": "Tripura",
        "latitude": 23.8315,
        "longitude": 91.2868,
        "contact_phone": "+91-98765-43214",
        "admin_name": "Dr. Biplab Deb",
    },
]

SAMPLE_ADMIN = {
    "name": "Dr. Priya Sharma",
    "email": "priya.sharma@jalsuraksha.gov.in",
    "role": "admin",
    "language": "en",
    "phone": "+91-98765-43210",
}


def seed_sample_data(store) -> None:
    """Load the sample PHCs and attach the admin user to the first one."""
    phcs = [store.phcs.create(data) for data in SAMPLE_PHCS]
    store.users.create({**SAMPLE_ADMIN, "phc_id": phcs[0].id})
    logger.info(f"Seeded {len(phcs)} PHCs and 1 user")
