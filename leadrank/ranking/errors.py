"""
Ranking error taxonomy.

Routes map these onto HTTP status codes; scorer failures never appear here
because the scorer recovers them into a fallback judgement.
"""


class RankingError(Exception):
    """Base class for errors surfaced to the driving caller."""
    status_code = 500


class RankingInputError(RankingError, ValueError):
    """Bad or empty request input. Nothing was mutated."""
    status_code = 400


class RunNotFoundError(RankingError, LookupError):
    """The named ranking run does not exist."""
    status_code = 404

    def __init__(self, run_id, message=None):
        self.run_id = run_id
        super().__init__(message or f"Ranking run '{run_id}' not found")


class RunStateError(RankingError):
    """Operation not allowed in the run's current lifecycle state."""
    status_code = 409

    def __init__(self, run_id, status, action):
        self.run_id = run_id
        self.status = status
        super().__init__(f"Cannot {action} run '{run_id}' with status '{status}'")


class RankingPersistenceError(RankingError):
    """Record-store write failed; the transaction was rolled back."""
    status_code = 500


class LeadImportError(RankingError, ValueError):
    """CSV lead ingestion failed."""
    status_code = 400
