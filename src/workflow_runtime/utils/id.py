"""ID generation utilities for the workflow runtime.

Synthetic tool-call ids are UUID v4 based.
"""

import uuid


def generate_uuid_with_dashes() -> str:
    """Generate a UUID v4 with dashes.

    Returns:
        UUID v4 string with standard format (xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx)
    """
    return str(uuid.uuid4())


def generate_tool_call_id() -> str:
    """Generate an id for a synthetic tool call."""
    return generate_uuid_with_dashes()

