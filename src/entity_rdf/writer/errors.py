"""Writer errors."""


class ProtocolError(RuntimeError):
    """
    Raised on an invalid writer call sequence or malformed primitive input
    (empty or relative IRI, unknown prefix, bad blank node label).

    Signals a defect in the calling builder. The partial buffer must be
    discarded.
    """
    pass
