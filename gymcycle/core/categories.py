"""
Legacy Plan Categories.

Projects a plan's total months onto the four-value category older reports
still group by. Shared by the plan schemas and the plan catalog.
"""

from gymcycle.core.enums import LegacyPlanCategory
from gymcycle.utils.errors import InvalidPlanDataError

# Upper bounds (inclusive) of total months for each legacy category
LEGACY_CATEGORY_BOUNDS: list[tuple[int, LegacyPlanCategory]] = [
    (1, LegacyPlanCategory.MONTHLY),
    (3, LegacyPlanCategory.QUARTERLY),
    (6, LegacyPlanCategory.HALF_YEARLY),
]


def legacy_category(total_months: int) -> LegacyPlanCategory:
    """
    Project a plan's total months onto the legacy four-value category.

    <=1 monthly, <=3 quarterly, <=6 half-yearly, anything longer annual.
    """
    if total_months < 1:
        raise InvalidPlanDataError(
            f"Total months must be at least 1, got {total_months}"
        )
    for upper_bound, category in LEGACY_CATEGORY_BOUNDS:
        if total_months <= upper_bound:
            return category
    return LegacyPlanCategory.ANNUAL
