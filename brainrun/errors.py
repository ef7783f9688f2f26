from brainrun.types import ErrorVal


class BrainrunError(Exception):
    """Exception type used to abort compilation or execution."""
    def __init__(self, err: ErrorVal):
        message = f"BrainrunError: {err.name}: {err.message}"
        if err.position is not None:
            message += f" (at instruction {err.position})"
        super().__init__(message)
        self.err = err

    @property
    def name(self) -> str:
        return self.err.name
