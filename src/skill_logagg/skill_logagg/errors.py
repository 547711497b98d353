'''
Exceptions raised by the log aggregation entry points.
'''
import enum


class MissingField(enum.Enum):
  '''
  Required event fields, in the order they are checked.
  '''
  SESSION = "Missing session"
  USER = "Missing user"
  USER_ID = "Missing userId"
  SESSION_ID = "Missing sessionId"
  REQUEST = "Missing request"
  REQUEST_TYPE = "Missing request type"


class LogAggError(Exception):
  pass


class ConfigError(LogAggError):
  pass


class ValidationError(LogAggError):

  def __init__(self, kind):
    super(ValidationError, self).__init__(kind.value)
    self.kind = kind


class StorageError(LogAggError):
  '''
  A storage backend operation failed. The original exception is kept in cause.
  '''

  def __init__(self, message, cause=None):
    super(StorageError, self).__init__(message)
    self.cause = cause


class ReadError(StorageError):
  pass


class ParseError(LogAggError):

  def __init__(self, key, cause=None):
    super(ParseError, self).__init__("Unable to parse record {}: {}".format(key, cause))
    self.key = key
    self.cause = cause
