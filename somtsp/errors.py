"""
Exceptions raised by the ring SOM core
"""


class RingSOMError(ValueError):
    """Base class for errors raised while validating a training run"""


class InvalidArgumentError(RingSOMError):
    """A hyperparameter is outside its valid range"""


class EmptyInputError(RingSOMError):
    """No cities (or no neurons) were given, so no tour can be produced"""
