import pytest

from skill_logagg.errors import MissingField
from skill_logagg.recordvalidator import validateEvent

from conftest import makeEvent


def test_valid_event():
  assert validateEvent(makeEvent()) is None
  assert validateEvent(makeEvent(request_type="LaunchRequest")) is None


@pytest.mark.parametrize("strip, expected", [
  (lambda e: e.pop("session"), MissingField.SESSION),
  (lambda e: e["session"].pop("user"), MissingField.USER),
  (lambda e: e["session"]["user"].pop("userId"), MissingField.USER_ID),
  (lambda e: e["session"].pop("sessionId"), MissingField.SESSION_ID),
  (lambda e: e.pop("request"), MissingField.REQUEST),
  (lambda e: e["request"].pop("type"), MissingField.REQUEST_TYPE),
])
def test_missing_field(strip, expected):
  event = makeEvent()
  strip(event)
  assert validateEvent(event) == expected


def test_first_missing_field_wins():
  event = makeEvent()
  event["session"].pop("sessionId")
  event.pop("request")
  assert validateEvent(event) == MissingField.SESSION_ID
  event["session"]["user"] = {}
  assert validateEvent(event) == MissingField.USER_ID


def test_empty_event():
  assert validateEvent({}) == MissingField.SESSION
  assert validateEvent(None) == MissingField.SESSION


def test_messages():
  assert MissingField.USER_ID.value == "Missing userId"
  assert MissingField.REQUEST_TYPE.value == "Missing request type"


def test_present_but_empty_objects():
  event = makeEvent()
  event["session"] = {}
  assert validateEvent(event) == MissingField.USER
  event = makeEvent()
  event["session"]["user"] = {}
  assert validateEvent(event) == MissingField.USER_ID
  event = makeEvent()
  event["request"] = {}
  assert validateEvent(event) == MissingField.REQUEST_TYPE


def test_objects_of_wrong_type():
  event = makeEvent()
  event["session"] = "x"
  assert validateEvent(event) == MissingField.SESSION
  event = makeEvent()
  event["request"] = None
  assert validateEvent(event) == MissingField.REQUEST
