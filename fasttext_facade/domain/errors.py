# fasttext_facade/domain/errors.py
#
# Each error also derives from the closest builtin so callers can catch
# either the facade type or the familiar Python one.


class FastTextFacadeError(Exception):
    """Base class for every error raised by the facade."""


class ModelFileNotFoundError(FastTextFacadeError, FileNotFoundError):
    pass


class IncompatibleFormatError(FastTextFacadeError, ValueError):
    pass


class InitializationFailureError(FastTextFacadeError, RuntimeError):
    """The engine accepted the header but could not initialize the model."""


class ModelNotLoadedError(FastTextFacadeError, RuntimeError):
    pass


class InvalidArgumentError(FastTextFacadeError, ValueError):
    pass


class ResourceExtractionError(FastTextFacadeError, OSError):
    """The bundled default model could not be copied to a temp file."""


class TrainingCommandError(FastTextFacadeError, ValueError):
    """Training argv rejected by the engine's argument grammar."""
