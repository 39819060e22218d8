
class SeasonResolutionError(Exception):
    """Raised when a season row can neither be read nor created."""
    pass

class LedgerIntegrityError(Exception):
    """Raised when a transaction's paid/due/status fields disagree."""
    pass
