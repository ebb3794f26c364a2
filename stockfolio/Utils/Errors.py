class StockfolioError(Exception):
    """Base class for errors the API turns into a client facing response."""

    status_code = 500


class AuthError(StockfolioError):
    status_code = 401


class ConflictError(StockfolioError):
    status_code = 409
