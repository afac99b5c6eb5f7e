"""Proposal service-line generation shared by the pricing strategies."""

from collections import OrderedDict
from typing import Dict, List, Optional, Sequence

from models.facility import (
    FACILITY_WIDE_AREA_ID,
    Facility,
    FacilityTask,
    FixtureInstance,
)
from models.quote import ProposalServiceLine, QuoteResult
from services.frequency_service import (
    TASK_FREQUENCY_LABELS,
    TASK_FREQUENCY_ORDER,
    frequency_label,
    proposal_frequency_for,
    service_type_for,
)


DEFAULT_INCLUDED_TASKS = [
    "Vacuum/mop all floors",
    "Empty trash receptacles",
    "Clean and sanitize restrooms",
    "Dust surfaces",
    "Wipe down high-touch areas",
]


def format_quantity(value: float) -> str:
    """Render 1000.0 as '1000' and 1250.5 as '1250.5'."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def group_tasks_by_area(tasks: Sequence[FacilityTask]) -> "OrderedDict[str, List[FacilityTask]]":
    """Group tasks by area id; area-less tasks go under the facility-wide id."""
    grouped: "OrderedDict[str, List[FacilityTask]]" = OrderedDict()
    for task in tasks:
        grouped.setdefault(task.area_id or FACILITY_WIDE_AREA_ID, []).append(task)
    return grouped


def describe_area(
    square_feet: float,
    floor_type: str,
    tasks: Sequence[FacilityTask],
    fixtures: Optional[Sequence[FixtureInstance]] = None,
) -> str:
    """Multi-line area description: size, optional fixtures, tasks by band."""
    parts = [f"{format_quantity(square_feet)} sq ft {floor_type} flooring"]

    if fixtures:
        summary = ", ".join(
            f"{fixture.name or fixture.fixture_type_id} x{fixture.count}" for fixture in fixtures
        )
        parts.append(f"Items: {summary}")

    by_band: Dict[str, List[str]] = {}
    for task in tasks:
        by_band.setdefault(task.cleaning_frequency, []).append(task.display_name)

    for band in TASK_FREQUENCY_ORDER:
        names = by_band.get(band)
        if names:
            parts.append(f"{TASK_FREQUENCY_LABELS.get(band, band)}: {', '.join(names)}")

    return "\n".join(parts)


def facility_service_line(
    quote: QuoteResult,
    description: str,
    included_tasks: List[str],
) -> ProposalServiceLine:
    """Single whole-facility line used when there is nothing to itemize."""
    frequency = quote.service_frequency
    return ProposalServiceLine(
        service_name=f"{frequency_label(frequency)} Cleaning Service",
        service_type=service_type_for(frequency),
        frequency=proposal_frequency_for(frequency),
        monthly_price=quote.monthly_total,
        description=description,
        included_tasks=included_tasks,
    )


def area_service_line(
    area_name: str,
    service_frequency: str,
    monthly_price: float,
    description: str,
    tasks: Sequence[FacilityTask],
) -> ProposalServiceLine:
    return ProposalServiceLine(
        service_name=area_name,
        service_type=service_type_for(service_frequency),
        frequency=proposal_frequency_for(service_frequency),
        monthly_price=monthly_price,
        description=description,
        included_tasks=[task.display_name for task in tasks],
    )


def fixtures_by_area(facility: Facility) -> Dict[str, List[FixtureInstance]]:
    fixtures = {area.id: list(area.fixtures) for area in facility.areas}
    fixtures.setdefault(FACILITY_WIDE_AREA_ID, [])
    return fixtures
