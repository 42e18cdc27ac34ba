from __future__ import annotations

from canteen.application.dto.responses import OrderItemResponse, OrderResponse
from canteen.domain.order.entities import Order


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        orderNumber=order.order_number,
        customerName=order.customer_name,
        tableId=str(order.table_id),
        tableNumber=order.table_number,
        canteenLocation=order.canteen_location,
        items=[
            OrderItemResponse(
                menuItemId=str(item.menu_item_id),
                name=item.name,
                quantity=item.quantity,
                specialInstructions=item.special_instructions,
            )
            for item in order.items
        ],
        status=order.status.value,
        statusLabel=order.status.label,
        eta=order.eta,
        staffNotes=order.staff_notes,
        acceptedAt=order.accepted_at,
        readyAt=order.ready_at,
        deliveredAt=order.delivered_at,
        createdAt=order.created_at,
        updatedAt=order.updated_at,
    )
