'''
Checks that an event carries the minimal information needed to log it.
'''
from skill_logagg.errors import MissingField


def validateEvent(event):
  '''
  Validate an interaction event.

  Fields are checked in order and the first missing one is reported. The
  session, user and request objects only need to be present; the id and type
  values must be non-empty.

  Args:
    event: dict describing the interaction

  Returns:
    MissingField member for the first missing field, or None if valid
  '''
  if not isinstance(event, dict):
    return MissingField.SESSION
  session = event.get("session")
  if not isinstance(session, dict):
    return MissingField.SESSION
  user = session.get("user")
  if not isinstance(user, dict):
    return MissingField.USER
  if not user.get("userId"):
    return MissingField.USER_ID
  if not session.get("sessionId"):
    return MissingField.SESSION_ID
  request = event.get("request")
  if not isinstance(request, dict):
    return MissingField.REQUEST
  if not request.get("type"):
    return MissingField.REQUEST_TYPE
  return None
