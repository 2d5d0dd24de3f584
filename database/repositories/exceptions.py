
class RepositoryError(Exception):
    """Base exception for all repository errors."""
    pass



class DatabaseConnectionError(RepositoryError):
    """Raised when the repository cannot connect to the database."""
    pass
