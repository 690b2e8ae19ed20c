"""
Domain errors - all of them abort the migration run
"""


class MigrationError(Exception):
    pass


class UnresolvedReference(MigrationError, LookupError):
    """A required foreign mapping was never recorded"""

    def __init__(self, kind: str, external_id):
        super().__init__(f"Unresolved {kind} reference: {external_id!r}")
        self.kind = kind
        self.external_id = external_id


class UnknownStatus(MigrationError, ValueError):
    """Profile status outside the known vocabulary"""

    def __init__(self, status):
        super().__init__(f"Unknown profile status: {status!r}")
        self.status = status
