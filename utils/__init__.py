"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, now_local, today_local, current_time_local
from utils.money import to_number, is_blank, round_half_up, format_amount, format_currency
from utils.dates import (
    DateRange,
    combine,
    is_valid_range,
    reconcile_date_range,
    format_wire_date,
    format_wire_time,
    parse_wire_date,
    parse_wire_time,
)
from utils.operator_context import (
    Operator,
    get_current_operator,
    get_current_hotel_id,
    set_current_operator,
    clear_current_operator,
    operator_context,
)
