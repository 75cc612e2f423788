from availability.exceptions.availability_exception import AvailabilityException


class DateExceptionNotFoundError(AvailabilityException):
    detail = "Exception not found"
    description = "The tutor has no exception for the requested date."
