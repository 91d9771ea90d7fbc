"""Menu selection validation."""
from typing import List, Literal, Mapping, Sequence, Union

from pydantic import BaseModel, ConfigDict, computed_field

from storefront.services.catalog.base import MenuDefinition
from storefront.services.ordering.models import MenuPick


class CountOutOfRange(BaseModel):
    """A group has fewer or more picks than it allows."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["count_out_of_range"] = "count_out_of_range"
    group_id: str
    group_name: str
    min: int
    max: int
    actual: int

    @computed_field  # type: ignore[misc]
    @property
    def message(self) -> str:
        if self.min == self.max:
            return f"Choose exactly {self.min} in {self.group_name} (chosen: {self.actual})"
        return (
            f"Choose between {self.min} and {self.max} in {self.group_name} "
            f"(chosen: {self.actual})"
        )


class OptionNotAllowed(BaseModel):
    """A pick is not on the group's allow-list."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["option_not_allowed"] = "option_not_allowed"
    group_id: str
    group_name: str
    product_id: str

    @computed_field  # type: ignore[misc]
    @property
    def message(self) -> str:
        return f"'{self.product_id}' is not available in {self.group_name}"


MenuSelectionError = Union[CountOutOfRange, OptionNotAllowed]


def validate_menu_selections(
    menu: MenuDefinition,
    selections: Mapping[str, Sequence[MenuPick]],
) -> List[MenuSelectionError]:
    """
    Check picks against every group's cardinality and allow-list.

    Returns:
        List of violations, empty when the selection can be checked out
    """
    errors: List[MenuSelectionError] = []
    for group in menu.groups:
        chosen = selections.get(group.id, ())

        if len(chosen) < group.min or len(chosen) > group.max:
            errors.append(
                CountOutOfRange(
                    group_id=group.id,
                    group_name=group.name,
                    min=group.min,
                    max=group.max,
                    actual=len(chosen),
                )
            )

        allowed_ids = {option.product_id for option in group.allowed}
        for pick in chosen:
            if pick.product_id not in allowed_ids:
                errors.append(
                    OptionNotAllowed(
                        group_id=group.id,
                        group_name=group.name,
                        product_id=pick.product_id,
                    )
                )
    return errors


def default_selections(menu: MenuDefinition) -> dict:
    """Preselect every option flagged as default, as the menu builder does."""
    return {
        group.id: [MenuPick(product_id=o.product_id) for o in group.allowed if o.default]
        for group in menu.groups
    }
