class IllegalStateError(RuntimeError):
    """
    Raised when an operation is invalid for the current lifecycle state of a
    stream, e.g. writing after `end()` or ending a stream twice.

    This is a programmer error: it is raised synchronously to the caller and
    is never retried or swallowed by the stream itself.
    """
