from .tenancy import Store
from .catalog import Staff, Service
from .scheduling import WorkingHourRule, AvailabilityBlock
from .appointments import Appointment, APPOINTMENT_CONFIRMED, APPOINTMENT_CANCELLED

__all__ = [
    'Store',
    'Staff', 'Service',
    'WorkingHourRule', 'AvailabilityBlock',
    'Appointment', 'APPOINTMENT_CONFIRMED', 'APPOINTMENT_CANCELLED',
]
