from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from canteen.domain.order.entities import MAX_SPECIAL_INSTRUCTIONS_LENGTH, MAX_STAFF_NOTES_LENGTH


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class CreateOrderItemRequest(CamelBaseModel):
    menu_item_id: str
    quantity: int = Field(ge=1)
    special_instructions: str | None = Field(
        default=None,
        max_length=MAX_SPECIAL_INSTRUCTIONS_LENGTH,
    )


class CreateOrderRequest(CamelBaseModel):
    table_id: str
    customer_name: str | None = None
    items: list[CreateOrderItemRequest] = Field(min_length=1)


class UpdateOrderRequest(CamelBaseModel):
    # plain string so unknown values surface as an invalid status, not a schema error
    status: str | None = None
    eta: int | None = Field(default=None, ge=1, le=240)
    staff_notes: str | None = Field(default=None, max_length=MAX_STAFF_NOTES_LENGTH)
