from availability.exceptions.availability_exception import AvailabilityException


class TrialLimitReachedError(AvailabilityException):
    detail = "Trial limit reached"
    description = "The student has used all of their trial lessons."


class TrialAlreadyUsedError(AvailabilityException):
    detail = "Trial already used with tutor"
    description = "The student has already taken a trial lesson with this tutor."
