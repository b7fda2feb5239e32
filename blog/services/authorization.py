"""
Ownership guard for mutating operations.
"""


def can_mutate(requester_id: int, owner_id: int) -> bool:
    """Allow a mutation only when the requester owns the resource.

    Resolve the resource's existence first; this only compares ids.
    """
    return requester_id == owner_id
