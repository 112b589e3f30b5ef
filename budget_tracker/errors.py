class ValidationError(ValueError):
    """Malformed or out-of-range input to a mutation.

    Raised for non-positive amounts, empty categories, invalid dates or enum
    values and non-positive budgets. Recoverable: the user corrects the input
    and submits again.
    """

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message

    def to_dict(self) -> dict:
        return {
            "error": "validation_error",
            "field": self.field,
            "message": self.message,
        }

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, ValidationError)
            and self.field == other.field
            and self.message == other.message
        )

    def __hash__(self) -> int:
        return hash((self.field, self.message))
