class InvalidInputError(ValueError):
    """Raised when a calculation's precondition is not met."""
    def __init__(self, message: str, missing_fields: list[str] | None = None):
        self.missing_fields = missing_fields or []
        super().__init__(message)
