"""Pure funding plan computation (no I/O)."""

from __future__ import annotations

from ....domain.treasury.entities import FundingPlan, FundingRequest


def plan_funding(current: int, target: int, ceiling: int) -> FundingPlan:
    """Partition ``target - current`` into requests of at most ``ceiling``.

    Returns an empty plan when ``current >= target``. Otherwise the plan has
    ``ceil(shortfall / ceiling)`` requests, each ``min(ceiling, remaining)``,
    so only the last one can be smaller than the ceiling.
    """
    if ceiling <= 0:
        raise ValueError("Funding ceiling must be positive")
    if target < 0:
        raise ValueError("Funding target cannot be negative")
    if current < 0:
        raise ValueError("Current balance cannot be negative")

    requests: list[FundingRequest] = []
    remaining = target - current
    while remaining > 0:
        amount = min(ceiling, remaining)
        requests.append(FundingRequest(index=len(requests), amount=amount))
        remaining -= amount

    return FundingPlan(
        current=current,
        target=target,
        ceiling=ceiling,
        requests=tuple(requests),
    )
