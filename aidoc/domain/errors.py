class AIDocError(Exception):
    """Base class for symptom-checker failures."""


class InvalidInput(AIDocError):
    """Symptom text is empty or whitespace only."""


class DiagnosisUnavailable(AIDocError):
    """The model call failed or its response could not be used."""


class StorageUnavailable(AIDocError):
    """Device-local storage could not be read or written."""
