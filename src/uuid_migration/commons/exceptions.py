"""
Common/base exceptions.

These are intended to be subclassed by feature-level exceptions in
`<feature>/exceptions.py`.
"""


class BaseCoreException(Exception):
    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class BaseUnProcessableException(BaseCoreException, ValueError):
    pass
