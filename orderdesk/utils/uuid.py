"""Primary key generation."""

import uuid


def generate_uuid() -> str:
    """Random UUID4 in its canonical string form."""
    return str(uuid.uuid4())
