"""In-memory leave analytics.

Every function is a single pass over already-fetched rows, so the same
code serves the HTTP layer and unit tests without a database.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Iterable, NamedTuple, Optional, Sequence

from leavedesk.analytics.schemas import (
    BalanceSummary,
    DepartmentUsage,
    LeaveTypeDistribution,
    MonthlyLeaveTrend,
)
from leavedesk.common.constants import (
    MONTH_LABELS,
    UNASSIGNED_DEPARTMENT,
    UNKNOWN_LEAVE_TYPE_CODE,
    UNKNOWN_LEAVE_TYPE_NAME,
    LeaveStatus,
)
from leavedesk.leave.balance import round_half_up, to_decimal, total_entitlement

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_TRENDED = (LeaveStatus.approved, LeaveStatus.pending, LeaveStatus.rejected)


class LeaveRecord(NamedTuple):
    """One leave application flattened with its department and type."""

    employee_id: uuid.UUID
    start_date: date
    days_count: Decimal
    status: LeaveStatus
    department_name: Optional[str] = None
    leave_type_id: Optional[uuid.UUID] = None
    leave_type_name: Optional[str] = None
    leave_type_code: Optional[str] = None


class BalanceFigures(NamedTuple):
    entitled_days: Decimal
    used_days: Decimal
    carried_forward_days: Decimal
    adjusted_days: Decimal


def monthly_trends(records: Iterable[LeaveRecord]) -> list[MonthlyLeaveTrend]:
    """Days per month of ``start_date`` split by status, Jan to Dec.

    A range spanning two months counts entirely toward its first month.
    Cancelled applications are ignored.
    """
    buckets = [{s: _ZERO for s in _TRENDED} for _ in MONTH_LABELS]
    for rec in records:
        if rec.status in _TRENDED:
            buckets[rec.start_date.month - 1][rec.status] += to_decimal(rec.days_count)
    return [
        MonthlyLeaveTrend(
            month=label,
            approved=float(bucket[LeaveStatus.approved]),
            pending=float(bucket[LeaveStatus.pending]),
            rejected=float(bucket[LeaveStatus.rejected]),
        )
        for label, bucket in zip(MONTH_LABELS, buckets)
    ]


def department_usage(records: Iterable[LeaveRecord]) -> list[DepartmentUsage]:
    """Approved days and distinct employees per department, largest first."""
    days: dict[str, Decimal] = {}
    people: dict[str, set[uuid.UUID]] = {}
    for rec in records:
        if rec.status != LeaveStatus.approved:
            continue
        name = rec.department_name or UNASSIGNED_DEPARTMENT
        days[name] = days.get(name, _ZERO) + to_decimal(rec.days_count)
        people.setdefault(name, set()).add(rec.employee_id)

    usage = [
        DepartmentUsage(
            department=name,
            total_days=round_half_up(total),
            employee_count=len(people[name]),
        )
        for name, total in days.items()
    ]
    return sorted(usage, key=lambda u: u.total_days, reverse=True)


def _fit_percentages(shares: Sequence[Decimal]) -> list[int]:
    """Half-up rounded percentages whose sum never exceeds 100.

    Overshoot is taken back one point at a time from the entries that
    were rounded up the most.
    """
    rounded = [round_half_up(s) for s in shares]
    excess = sum(rounded) - 100
    if excess > 0:
        by_overshoot = sorted(
            range(len(shares)), key=lambda i: rounded[i] - shares[i], reverse=True,
        )
        for i in by_overshoot[:excess]:
            rounded[i] -= 1
    return rounded


def leave_type_distribution(records: Iterable[LeaveRecord]) -> list[LeaveTypeDistribution]:
    """Approved days per leave type with their share of all approved days."""
    totals: dict[Optional[uuid.UUID], Decimal] = {}
    labels: dict[Optional[uuid.UUID], tuple[str, str]] = {}
    for rec in records:
        if rec.status != LeaveStatus.approved:
            continue
        key = rec.leave_type_id
        if key not in labels:
            labels[key] = (
                rec.leave_type_name or UNKNOWN_LEAVE_TYPE_NAME,
                rec.leave_type_code or UNKNOWN_LEAVE_TYPE_CODE,
            )
        totals[key] = totals.get(key, _ZERO) + to_decimal(rec.days_count)

    grand_total = sum(totals.values(), _ZERO)
    keys = list(totals)
    if grand_total > 0:
        percentages = _fit_percentages([totals[k] / grand_total * _HUNDRED for k in keys])
    else:
        percentages = [0] * len(keys)

    distribution = [
        LeaveTypeDistribution(
            name=labels[k][0],
            code=labels[k][1],
            total_days=round_half_up(totals[k]),
            percentage=pct,
        )
        for k, pct in zip(keys, percentages)
    ]
    return sorted(distribution, key=lambda d: d.total_days, reverse=True)


def balance_summary(balances: Iterable[BalanceFigures]) -> BalanceSummary:
    entitled = _ZERO
    used = _ZERO
    for b in balances:
        entitled += total_entitlement(
            entitled=b.entitled_days,
            carried_forward=b.carried_forward_days,
            adjusted=b.adjusted_days,
        )
        used += to_decimal(b.used_days)

    return BalanceSummary(
        total_entitled=round_half_up(entitled),
        total_used=round_half_up(used),
        total_available=round_half_up(entitled - used),
        utilization_rate=round_half_up(used / entitled * _HUNDRED) if entitled > 0 else 0,
    )
