"""Per Hour (Task Minutes V1) pricing strategy.

Expands facility tasks and fixtures into monthly labor minutes per area,
scales the resulting hours by floor/condition/traffic difficulty, then
builds the full overhead cost stack on top of labor:

    labor base -> burden -> insurance -> admin -> equipment -> supply

Travel is charged once per facility visit. The summed cost is inverted
through the target profit margin, the task-complexity add-on is applied
after inversion, and the minimum monthly charge is applied last.

workerCount is recorded on the snapshot but never scales the price.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import structlog

from models.facility import (
    FACILITY_WIDE_AREA_ID,
    FACILITY_WIDE_AREA_NAME,
    Area,
    FacilityTask,
)
from models.pricing_settings import ConditionLevel, FloorType, PricingSettings, TrafficLevel
from models.quote import (
    AreaCostRow,
    CostBreakdown,
    PricingContext,
    ProposalServiceLine,
    QuoteResult,
)
from services.frequency_service import add_on_for, monthly_visits, multiplier_for, round_money
from strategies.base_strategy import BasePricingStrategy
from strategies.service_lines import (
    area_service_line,
    describe_area,
    facility_service_line,
    fixtures_by_area,
    group_tasks_by_area,
)

logger = structlog.get_logger()


PER_HOUR_V1 = "per_hour_v1"

MINUTES_PER_HOUR = 60.0


@dataclass
class ResolvedTask:
    """Per-occurrence minute components after override/template resolution."""

    task_id: str
    cleaning_frequency: str
    base_minutes: float = 0.0
    per_sqft_minutes: float = 0.0
    per_unit_minutes: float = 0.0
    per_room_minutes: float = 0.0
    fixture_minutes: Dict[str, float] = field(default_factory=dict)

    @property
    def visits(self) -> float:
        return monthly_visits(self.cleaning_frequency)


def resolve_task(task: FacilityTask) -> ResolvedTask:
    """Override beats template beats zero, component by component."""
    template = task.template

    def pick(override: Optional[float], attr: str) -> float:
        if override is not None:
            return float(override)
        if template is not None:
            return float(getattr(template, attr) or 0.0)
        return 0.0

    fixture_minutes: Dict[str, float] = {}
    if template is not None:
        fixture_minutes.update(template.fixture_minutes)
    fixture_minutes.update(task.fixture_minutes_overrides)

    return ResolvedTask(
        task_id=task.id,
        cleaning_frequency=task.cleaning_frequency,
        base_minutes=pick(task.base_minutes_override, "base_minutes"),
        per_sqft_minutes=pick(task.per_sqft_minutes_override, "per_sqft_minutes"),
        per_unit_minutes=pick(task.per_unit_minutes_override, "per_unit_minutes"),
        per_room_minutes=pick(task.per_room_minutes_override, "per_room_minutes"),
        fixture_minutes=fixture_minutes,
    )


class PerHourV1Strategy(BasePricingStrategy):
    """Labor-minutes pricing with a full overhead cost stack."""

    key = PER_HOUR_V1
    name = "Per Hour (Task Minutes V1)"
    description = (
        "Calculates pricing based on task minutes per area, fixtures, and "
        "per-worker hourly labor cost with overhead and profit margin."
    )
    version = "1.0.0"

    def quote(self, context: PricingContext) -> QuoteResult:
        plan = self.resolve_plan(context)
        facility = self.load_facility(context.facility_id)
        margin = self.check_profit_margin(plan)

        building_type = facility.building_type or "other"
        add_on = add_on_for(plan.task_complexity_add_ons, context.task_complexity)
        requested_visits = monthly_visits(context.service_frequency)

        tasks_by_area = group_tasks_by_area(self.store.list_facility_tasks(facility.id))
        areas = list(facility.areas)
        if tasks_by_area.get(FACILITY_WIDE_AREA_ID):
            areas.append(self._facility_wide_area(facility.total_square_feet))

        rows: List[AreaCostRow] = []
        highest_task_visits = 0.0
        for area in areas:
            tasks = [resolve_task(t) for t in tasks_by_area.get(area.id, [])]
            rows.append(self._cost_area(area, tasks, plan, requested_visits, margin, add_on))
            highest_task_visits = max([highest_task_visits] + [t.visits for t in tasks])

        # Trips follow scheduled tasks only, never the requested frequency
        travel_cost = round_money(plan.travel_cost_per_visit * highest_task_visits)

        breakdown = CostBreakdown(
            total_labor_hours=round_money(sum(row.labor_hours for row in rows)),
            total_labor_cost=self.sum_money(row.total_labor_cost for row in rows),
            total_insurance_cost=self.sum_money(row.insurance_cost for row in rows),
            total_admin_overhead_cost=self.sum_money(row.admin_overhead_cost for row in rows),
            total_equipment_cost=self.sum_money(row.equipment_cost for row in rows),
            total_supply_cost=self.sum_money(row.supply_cost for row in rows),
            total_travel_cost=travel_cost,
            total_cost=self.sum_money([row.total_cost for row in rows] + [travel_cost]),
        )

        total_cost = breakdown.total_cost
        subtotal_raw = total_cost / (1 - margin)
        subtotal = round_money(subtotal_raw)
        profit_amount = round_money(subtotal_raw - total_cost)
        task_complexity_amount = round_money(subtotal_raw * add_on)

        # Add-on applies after margin inversion
        monthly_total = round_money(subtotal_raw * (1 + add_on))
        monthly_total, minimum_applied = self.apply_minimum(monthly_total, plan)

        percentage, payout, revenue = self.split_revenue(
            monthly_total, plan, context.subcontractor_percentage_override
        )

        logger.debug(
            "per_hour_quote_computed",
            facility_id=facility.id,
            areas=len(rows),
            total_cost=total_cost,
            monthly_total=monthly_total,
            minimum_applied=minimum_applied,
            worker_count=context.worker_count,
        )

        return QuoteResult(
            facility_id=facility.id,
            facility_name=facility.name,
            building_type=building_type,
            building_multiplier=1.0,
            service_frequency=context.service_frequency,
            total_square_feet=facility.total_square_feet,
            areas=rows,
            cost_breakdown=breakdown,
            monthly_visits=requested_visits,
            monthly_cost_before_profit=total_cost,
            profit_amount=profit_amount,
            profit_margin_applied=margin,
            task_complexity_add_on=add_on,
            task_complexity_amount=task_complexity_amount,
            subtotal=subtotal,
            monthly_total=monthly_total,
            minimum_applied=minimum_applied,
            subcontractor_percentage=percentage,
            subcontractor_payout=payout,
            company_revenue=revenue,
            pricing_plan_id=plan.id,
            pricing_plan_name=plan.name,
            strategy_key=self.key,
            strategy_version=self.version,
            settings_snapshot=self.snapshots.build(plan, context.worker_count),
        )

    @staticmethod
    def _facility_wide_area(square_feet: float) -> Area:
        """Pseudo-area that carries tasks not bound to any area."""
        return Area(
            id=FACILITY_WIDE_AREA_ID,
            name=FACILITY_WIDE_AREA_NAME,
            area_type_name=FACILITY_WIDE_AREA_NAME,
            square_feet=square_feet,
            quantity=1,
            floor_type=FloorType.VCT.value,
            condition_level=ConditionLevel.STANDARD.value,
            traffic_level=TrafficLevel.MEDIUM.value,
        )

    def _cost_area(
        self,
        area: Area,
        tasks: List[ResolvedTask],
        plan: PricingSettings,
        requested_visits: float,
        margin: float,
        add_on: float,
    ) -> AreaCostRow:
        quantity = area.quantity
        total_sqft = area.total_square_feet
        total_units = area.unit_count * quantity
        total_rooms = area.room_count * quantity

        task_minutes = 0.0
        for task in tasks:
            per_visit = (
                task.base_minutes
                + task.per_sqft_minutes * total_sqft
                + task.per_unit_minutes * total_units
                + task.per_room_minutes * total_rooms
            )
            for fixture in area.fixtures:
                minutes = task.fixture_minutes.get(fixture.fixture_type_id, 0.0)
                per_visit += minutes * (fixture.count * quantity)
            task_minutes += per_visit * task.visits

        # Item minutes run once per visit at the area's busiest task frequency.
        # An idle area (no tasks, no item work) is never visited.
        item_minutes_per_visit = sum(
            (fixture.minutes_per_item or 0.0) * (fixture.count * quantity)
            for fixture in area.fixtures
        )
        if tasks:
            area_visits = max(t.visits for t in tasks)
        elif item_minutes_per_visit:
            area_visits = requested_visits
        else:
            area_visits = 0.0
        item_minutes = item_minutes_per_visit * area_visits

        floor_multiplier = multiplier_for(plan.floor_type_multipliers, area.floor_type)
        condition_multiplier = multiplier_for(plan.condition_multipliers, area.condition_level)
        traffic_multiplier = multiplier_for(plan.traffic_multipliers, area.traffic_level)

        base_hours = (task_minutes + item_minutes) / MINUTES_PER_HOUR
        labor_hours = base_hours * floor_multiplier * condition_multiplier * traffic_multiplier

        labor_cost_base = labor_hours * plan.labor_cost_per_hour
        labor_burden = labor_cost_base * plan.labor_burden_percentage
        total_labor_cost = labor_cost_base + labor_burden

        insurance_cost = total_labor_cost * plan.insurance_percentage
        admin_overhead_cost = total_labor_cost * plan.admin_overhead_percentage
        equipment_cost = total_labor_cost * plan.equipment_percentage

        if plan.supply_cost_per_sq_ft is not None:
            supply_cost = plan.supply_cost_per_sq_ft * total_sqft * area_visits
        else:
            supply_cost = (
                total_labor_cost + insurance_cost + admin_overhead_cost + equipment_cost
            ) * plan.supply_cost_percentage

        total_cost = (
            total_labor_cost + insurance_cost + admin_overhead_cost + equipment_cost + supply_cost
        )

        return AreaCostRow(
            area_id=area.id,
            area_name=area.display_name,
            area_type_name=area.area_type_name,
            square_feet=total_sqft,
            floor_type=area.floor_type,
            condition_level=area.condition_level,
            traffic_level=area.traffic_level,
            quantity=quantity,
            labor_minutes=round_money(task_minutes + item_minutes),
            base_labor_hours=round_money(base_hours),
            labor_hours=round_money(labor_hours),
            labor_cost_base=round_money(labor_cost_base),
            labor_burden=round_money(labor_burden),
            total_labor_cost=round_money(total_labor_cost),
            insurance_cost=round_money(insurance_cost),
            admin_overhead_cost=round_money(admin_overhead_cost),
            equipment_cost=round_money(equipment_cost),
            supply_cost=round_money(supply_cost),
            total_cost=round_money(total_cost),
            floor_multiplier=floor_multiplier,
            condition_multiplier=condition_multiplier,
            traffic_multiplier=traffic_multiplier,
            monthly_visits=area_visits,
            monthly_price=round_money(total_cost / (1 - margin) * (1 + add_on)),
        )

    def generate_proposal_services(self, context: PricingContext) -> List[ProposalServiceLine]:
        """One line per costed area, priced by its share of the monthly total."""
        quote = self.quote(context)

        if not quote.areas:
            return [facility_service_line(
                quote,
                description="Includes all scheduled cleaning tasks for the facility.",
                included_tasks=[],
            )]

        facility = self.load_facility(context.facility_id)
        tasks_by_area = group_tasks_by_area(self.store.list_facility_tasks(context.facility_id))
        fixtures = fixtures_by_area(facility)
        total_area_cost = sum(row.total_cost for row in quote.areas)

        services = []
        for row in quote.areas:
            tasks = tasks_by_area.get(row.area_id, [])
            share = row.total_cost / total_area_cost if total_area_cost > 0 else 0.0
            services.append(area_service_line(
                area_name=row.area_name,
                service_frequency=context.service_frequency,
                monthly_price=round_money(quote.monthly_total * share),
                description=describe_area(
                    row.square_feet, row.floor_type, tasks, fixtures.get(row.area_id)
                ),
                tasks=tasks,
            ))
        return services
