"""Error taxonomy shared by services and routes."""


class AidConnectError(Exception):
    status_code = 500
    message = 'Internal error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class Unauthorized(AidConnectError):
    status_code = 403
    message = 'Unauthorized'


class InvalidCredentials(AidConnectError):
    status_code = 401
    message = 'Invalid credentials'


class NotFound(AidConnectError):
    status_code = 404
    message = 'Not found'


class DuplicateUser(AidConnectError):
    status_code = 409
    message = 'User already exists'


class InvalidTransition(AidConnectError):
    status_code = 409
    message = 'Invalid state'


class ValidationFailure(AidConnectError):
    status_code = 400
    message = 'Missing required field'


class InvalidResetToken(AidConnectError):
    status_code = 400
    message = 'Invalid reset link'


class ExternalServiceFailure(AidConnectError):
    status_code = 502
    message = 'External service failed'
