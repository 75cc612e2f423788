class AvailabilityException(Exception):
    detail: str
    description: str

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.detail
        super().__init__(self.message)
