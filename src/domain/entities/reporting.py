"""
Reports-to hierarchy rules.

Within a tenant, users form a forest through `reports_to_user_id`. These
functions validate a proposed manager change against the chain of managers
above the new manager, without any I/O.
"""

from collections.abc import Sequence

from src.domain.exceptions import (CyclicReportingChainError,
                                   SelfReportingNotAllowedError)

# (user_id, reports_to_user_id) pairs, starting at the proposed manager
ManagerChain = Sequence[tuple[str, str | None]]


def assert_not_self_reporting(user_id: str, manager_id: str | None) -> None:
    if manager_id is not None and manager_id == user_id:
        raise SelfReportingNotAllowedError(user_id)


def assert_chain_acyclic(user_id: str, manager_id: str, chain: ManagerChain, max_depth: int) -> None:
    """
    Reject the change when `user_id` already sits above `manager_id`.

    `chain` lists the proposed manager followed by each successive manager
    above it, loaded up to `max_depth` hops. A chain that reached the depth
    bound and still points further up can only come from a loop already
    present in stored data, so it is rejected too.
    """
    for member_id, _ in chain:
        if member_id == user_id:
            raise CyclicReportingChainError(user_id, manager_id)

    if chain and len(chain) >= max_depth and chain[-1][1] is not None:
        raise CyclicReportingChainError(user_id, manager_id)


def reports_to_changed(previous: str | None, new: str | None) -> bool:
    return (previous or None) != (new or None)
