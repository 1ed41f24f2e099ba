class StorageError(Exception):
    """
    Exception raised when the chain store fails (I/O, corrupted rows, schema
    mismatch). Always propagated to the caller, never retried.
    """
    def __init__(self, message="Chain store failure"):
        super().__init__(message)


class NoDataError(Exception):
    """
    Exception raised when a sentence is requested from a store that has
    never learned anything.
    """
    def __init__(self, message="No data to generate from"):
        super().__init__(message)


class ContractViolation(Exception):
    """
    Exception raised when an internal invariant is broken, e.g. sampling
    from an empty weight map.
    """
    def __init__(self, message="Internal contract violated"):
        super().__init__(message)
