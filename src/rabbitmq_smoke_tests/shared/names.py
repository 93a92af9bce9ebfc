"""Random resource names.

Apps, service instances, orgs and spaces get a fresh UUID so concurrent
runs against the same platform never collide.
"""

import uuid


def random_name(prefix: str | None = None) -> str:
    """Return a random resource name.

    Args:
        prefix: Optional prefix joined with a dash

    Returns:
        UUID4 string, prefixed when a prefix is given
    """
    name = str(uuid.uuid4())
    if prefix:
        return f"{prefix}-{name}"
    return name
