from availability.exceptions.availability_exception import AvailabilityException


class ConfigurationError(AvailabilityException):
    detail = "Invalid availability configuration"
    description = "The tutor's availability data is inconsistent and must be fixed by its owner."


class InvalidTimezoneError(ConfigurationError):
    detail = "Invalid timezone"
    description = "The timezone identifier is not a known IANA zone."


class InvalidRangeError(ConfigurationError):
    detail = "Invalid time range"
    description = "A time range must start before it ends."


class CrossingMidnightError(ConfigurationError):
    detail = "Time range crosses midnight"
    description = "A time range must start and end on the same calendar date."


class InvalidDurationError(ConfigurationError):
    detail = "Invalid duration"
    description = "The lesson duration must be a positive number of minutes."


class InvalidSlotIntervalError(ConfigurationError):
    detail = "Invalid slot interval"
    description = "The slot interval must be a positive number of minutes."


class InvalidWindowError(ConfigurationError):
    detail = "Invalid date window"
    description = "The first date of the window must not be after the last one."


class DuplicateExceptionError(ConfigurationError):
    detail = "Duplicate date exception"
    description = "At most one exception may exist for a calendar date."


class InvalidWeeklyScheduleError(ConfigurationError):
    detail = "Invalid weekly schedule"
    description = "The weekly schedule must contain exactly seven days, Monday first."
