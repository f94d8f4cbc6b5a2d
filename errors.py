# errors.py
"""
Error taxonomy for the criteria matrix backend.
Each error carries the HTTP status the Flask error handler answers with.
"""


class MatrixError(Exception):
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self):
        return {"error": self.message}


class ValidationError(MatrixError):
    """Invalid request"""
    status_code = 400


class AuthError(MatrixError):
    """Authentication required"""
    status_code = 401


class NotFoundError(MatrixError):
    """Not found"""
    status_code = 404


class DuplicateNameError(MatrixError):
    """Name already exists"""
    status_code = 409
