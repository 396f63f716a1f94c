"""
Fatal errors for the pairing pipeline.

Per-record problems (bad gender text, broken rank vectors, ...) are not
exceptions: they are recorded on the profile and the run continues. The
classes here signal that the input dataset itself is inconsistent, and the
run must stop without emitting partial results.
"""


class PairingError(Exception):
    """Base class for structural failures that abort a pairing run."""

    def __init__(self, code: str, message: str, context: str = ""):
        super().__init__(message)
        self.code = code
        self.context = context

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            return f"{message} [{self.context}]"
        return message


class RecordFormatError(PairingError):
    """A record does not have the number of fields its layout requires."""

    def __init__(self, message: str, context: str = ""):
        super().__init__("record_format", message, context)


class PreMatchError(PairingError):
    """A pre-match directive is missing its counterpart or is not reciprocated."""

    def __init__(self, message: str, context: str = ""):
        super().__init__("pre_match", message, context)


class BindingError(PairingError):
    """A seeker or host was bound to a counterpart more than once."""

    def __init__(self, message: str, context: str = ""):
        super().__init__("binding", message, context)
