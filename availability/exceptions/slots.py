from availability.exceptions.availability_exception import AvailabilityException


class InvalidSlotError(AvailabilityException):
    detail = "Invalid slot"
    description = "The requested slot must end after it starts."


class SlotNotInAvailabilityError(AvailabilityException):
    detail = "Slot not in availability"
    description = "The requested slot is not one of the tutor's bookable slots."


class SlotClashError(AvailabilityException):
    detail = "Slot already booked"
    description = "The requested slot overlaps an existing booking."
