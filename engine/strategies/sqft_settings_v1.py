"""Square Footage (Settings V1) pricing strategy.

Prices each area as area x rate x floor x condition x frequency
multiplier x (1 + complexity add-on), sums the rounded rows, applies the
building multiplier and finally the minimum monthly charge.
"""

from typing import List

import structlog

from models.facility import Area
from models.pricing_settings import PricingSettings
from models.quote import AreaPriceRow, PricingContext, ProposalServiceLine, QuoteResult
from services.frequency_service import add_on_for, multiplier_for, round_money
from strategies.base_strategy import BasePricingStrategy
from strategies.service_lines import (
    DEFAULT_INCLUDED_TASKS,
    area_service_line,
    describe_area,
    facility_service_line,
    format_quantity,
    group_tasks_by_area,
)

logger = structlog.get_logger()


SQFT_SETTINGS_V1 = "sqft_settings_v1"


class SqftSettingsV1Strategy(BasePricingStrategy):
    """Area-rate pricing driven entirely by plan multipliers."""

    key = SQFT_SETTINGS_V1
    name = "Square Footage (Settings V1)"
    description = (
        "Calculates pricing based on square footage with configurable multipliers "
        "for floor type, condition, frequency, and building type."
    )
    version = "1.0.0"

    def quote(self, context: PricingContext) -> QuoteResult:
        plan = self.resolve_plan(context)
        facility = self.load_facility(context.facility_id)

        building_type = facility.building_type or "other"
        building_multiplier = multiplier_for(plan.building_type_multipliers, building_type)
        frequency_multiplier = multiplier_for(plan.frequency_multipliers, context.service_frequency)
        add_on = add_on_for(plan.task_complexity_add_ons, context.task_complexity)

        rows = [
            self._price_area(area, plan, frequency_multiplier, add_on)
            for area in facility.areas
        ]

        # Sum of rounded rows, not round of sum
        subtotal = self.sum_money(row.area_total for row in rows)
        building_adjustment = round_money(subtotal * (building_multiplier - 1))
        monthly_total = round_money(subtotal + building_adjustment)
        monthly_total, minimum_applied = self.apply_minimum(monthly_total, plan)

        task_complexity_amount = round_money(sum(
            row.price_before_frequency * frequency_multiplier * add_on for row in rows
        ))

        percentage, payout, revenue = self.split_revenue(
            monthly_total, plan, context.subcontractor_percentage_override
        )

        logger.debug(
            "sqft_quote_computed",
            facility_id=facility.id,
            areas=len(rows),
            subtotal=subtotal,
            monthly_total=monthly_total,
            minimum_applied=minimum_applied,
        )

        return QuoteResult(
            facility_id=facility.id,
            facility_name=facility.name,
            building_type=building_type,
            building_multiplier=building_multiplier,
            service_frequency=context.service_frequency,
            total_square_feet=facility.total_square_feet,
            areas=rows,
            building_adjustment=building_adjustment,
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

    def _price_area(
        self,
        area: Area,
        plan: PricingSettings,
        frequency_multiplier: float,
        add_on: float,
    ) -> AreaPriceRow:
        total_sqft = area.total_square_feet
        floor_multiplier = multiplier_for(plan.floor_type_multipliers, area.floor_type)
        condition_multiplier = multiplier_for(plan.condition_multipliers, area.condition_level)

        base_price = total_sqft * plan.base_rate_per_sq_ft
        price_before_frequency = base_price * floor_multiplier * condition_multiplier
        monthly_price = price_before_frequency * frequency_multiplier * (1 + add_on)

        return AreaPriceRow(
            area_id=area.id,
            area_name=area.display_name,
            area_type_name=area.area_type_name,
            square_feet=total_sqft,
            floor_type=area.floor_type,
            condition_level=area.condition_level,
            quantity=area.quantity,
            base_price=round_money(base_price),
            floor_multiplier=floor_multiplier,
            condition_multiplier=condition_multiplier,
            frequency_multiplier=frequency_multiplier,
            task_complexity_add_on=add_on,
            price_before_frequency=round_money(price_before_frequency),
            area_total=round_money(monthly_price),
        )

    def generate_proposal_services(self, context: PricingContext) -> List[ProposalServiceLine]:
        """One line per priced area, or a single facility line when no tasks exist."""
        quote = self.quote(context)
        tasks_by_area = group_tasks_by_area(self.store.list_facility_tasks(context.facility_id))

        if not tasks_by_area:
            summary = ", ".join(
                f"{row.area_name} ({format_quantity(row.square_feet)} sq ft)" for row in quote.areas
            )
            return [facility_service_line(
                quote,
                description=f"Includes: {summary}",
                included_tasks=list(DEFAULT_INCLUDED_TASKS),
            )]

        services = []
        for row in quote.areas:
            tasks = tasks_by_area.get(row.area_id, [])
            services.append(area_service_line(
                area_name=row.area_name,
                service_frequency=context.service_frequency,
                monthly_price=row.area_total,
                description=describe_area(row.square_feet, row.floor_type, tasks),
                tasks=tasks,
            ))
        return services
