class LedgerError(Exception):
    """Base class for errors raised by the ledger services."""


class NotFoundError(LedgerError):
    def __init__(self, entity: str, identifier: object):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class ConflictError(LedgerError):
    pass


class ValidationError(LedgerError):
    pass


class PredictionUnavailableError(LedgerError):
    """Raised when every prediction source failed for a transaction."""
