"""
Order progress timelines.

The gateway never moves an order between statuses; it only reports where
the upstream status sits on a fixed list of steps.
"""
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from schemas import Order, OrderStatus, TrackingUpdate

TRACKING_STEPS = (
    (OrderStatus.CONFIRMED, "Order Confirmed"),
    (OrderStatus.SHIPPED, "Shipped"),
    (OrderStatus.DELIVERED, "Delivered"),
)

DASHBOARD_STEPS = (
    (OrderStatus.PENDING, "Pending"),
    (OrderStatus.CONFIRMED, "Confirmed"),
    (OrderStatus.PROCESSING, "Processing"),
    (OrderStatus.SHIPPED, "Shipped"),
    (OrderStatus.DELIVERED, "Delivered"),
)


class TimelineStep(BaseModel):
    key: OrderStatus
    label: str
    reached: bool


class TimelineUpdate(BaseModel):
    status: str
    label: str
    message: str = ""
    location: str = ""
    timestamp: Optional[str] = None


class Timeline(BaseModel):
    order_id: str
    tracking_id: Optional[str] = None
    status: OrderStatus
    terminal: bool
    mode: Literal["updates", "status"]
    progress: float = 0
    steps: List[TimelineStep] = Field(default_factory=list)
    updates: List[TimelineUpdate] = Field(default_factory=list)


def _index(status: OrderStatus, steps: Sequence) -> int:
    for i, (key, _) in enumerate(steps):
        if key == status:
            return i
    return -1


def is_status_reached(step: OrderStatus, status: OrderStatus, steps: Sequence = TRACKING_STEPS) -> bool:
    step_index = _index(step, steps)
    current_index = _index(status, steps)
    if step_index < 0 or current_index < 0:
        return False
    return current_index >= step_index


def status_progress(status: OrderStatus, steps: Sequence = TRACKING_STEPS) -> float:
    index = _index(status, steps)
    if index < 0:
        return 0
    return (index + 1) / len(steps) * 100


def status_steps(status: OrderStatus, steps: Sequence = TRACKING_STEPS) -> List[TimelineStep]:
    return [TimelineStep(key=key, label=label, reached=is_status_reached(key, status, steps)) for key, label in steps]


def _update_view(update: TrackingUpdate) -> TimelineUpdate:
    return TimelineUpdate(
        status=update.status,
        label=update.label,
        message=update.message,
        location=update.location,
        timestamp=update.timestamp.isoformat() if update.timestamp else None,
    )


def build_timeline(order: Order, steps: Sequence = TRACKING_STEPS) -> Timeline:
    """
    Timeline for the tracking page.

    Courier updates, when present, are shown as received; otherwise the
    order status is placed on ``steps``.
    """
    timeline = Timeline(
        order_id=order.id,
        tracking_id=order.tracking_id,
        status=order.status,
        terminal=order.status.is_terminal,
        mode="status",
        progress=status_progress(order.status, steps),
    )
    if order.tracking_updates:
        timeline.mode = "updates"
        timeline.updates = [_update_view(u) for u in order.tracking_updates]
    else:
        timeline.steps = status_steps(order.status, steps)
    return timeline


def dashboard_timeline(order: Order) -> Timeline:
    return build_timeline(order.model_copy(update={"tracking_updates": []}), DASHBOARD_STEPS)
