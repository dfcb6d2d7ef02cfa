"""
Record identifier generation.
"""

import uuid


class IdentifierGenerator:
    """Produces canonical UUID4 strings for new records."""

    def next(self) -> str:
        return str(uuid.uuid4())
