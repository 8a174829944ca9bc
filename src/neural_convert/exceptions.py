class NeuralConvertError(Exception):
    """
    Base exception for neural-convert custom error types.
    """


class ShapeError(NeuralConvertError):
    """
    A matrix or tensor in portable form is not rectangular or is empty.
    """


class ProtocolError(NeuralConvertError):
    """
    A stream of portable units doesn't contain the fields a model schema expects,
    in the order and of the kind it expects.
    """


class ConfigurationError(NeuralConvertError):
    pass


class CLIError(NeuralConvertError):
    pass


class CollaboratorAbsent(NeuralConvertError):
    """
    Raised when a model has no sub-model to detach. This is not a failure, callers
    should treat it as "nothing to do".
    """
