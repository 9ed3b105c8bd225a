class MongoDriverError(Exception):
    """Base exception for all mongodriver errors."""


class NotFoundError(MongoDriverError):
    """Raised when a database or collection does not exist on the server."""


class InvalidArgument(MongoDriverError, ValueError):
    """Raised when a caller passes a malformed value, such as a bad ObjectId."""
