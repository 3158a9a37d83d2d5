class DatabaseError(Exception):
    pass


class DatabaseConnectionError(DatabaseError):
    """The driver could not open a connection with the given parameters."""


class TransactionError(DatabaseError):
    pass


class InvalidArgumentError(DatabaseError, ValueError):
    pass


class InvalidStatementClassError(DatabaseError, TypeError):
    pass


class StatementError(DatabaseError):
    """A statement failed while the connection runs in ``ErrMode.EXCEPTION``."""

    def __init__(self, message, sqlstate='HY000', driver_code=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.driver_code = driver_code

    @property
    def error_info(self):
        return self.sqlstate, self.driver_code, str(self)
