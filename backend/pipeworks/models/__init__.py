from .inventory import Item, ITEM_CATEGORIES, ITEM_STATUSES
from .orders import (
    Order,
    OrderLine,
    OrderStatusHistory,
    ORDER_STATUSES,
    PRIORITIES,
    PAYMENT_STATUSES,
)
from .staff import (
    Staff,
    Role,
    staff_roles,
    STAFF_ROLES,
    DEPARTMENTS,
    EMPLOYMENT_STATUSES,
    SHIFT_TYPES,
)
from .timekeeping import AttendanceRecord, TimeSheet, ATTENDANCE_STATUSES, TIMESHEET_STATUSES

__all__ = [
    'Item', 'ITEM_CATEGORIES', 'ITEM_STATUSES',
    'Order', 'OrderLine', 'OrderStatusHistory',
    'ORDER_STATUSES', 'PRIORITIES', 'PAYMENT_STATUSES',
    'Staff', 'Role', 'staff_roles',
    'STAFF_ROLES', 'DEPARTMENTS', 'EMPLOYMENT_STATUSES', 'SHIFT_TYPES',
    'AttendanceRecord', 'TimeSheet', 'ATTENDANCE_STATUSES', 'TIMESHEET_STATUSES',
]
