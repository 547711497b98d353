import json
import random
import time

import pytest

from skill_logagg.errors import StorageError


def makeEvent(user_id="user-1", session_id="session-1", request_type="IntentRequest",
              intent_name="OrderIntent", slots=None):
  event = {
    "version": "1.0",
    "session": {
      "new": False,
      "sessionId": session_id,
      "application": {"applicationId": "amzn1.ask.skill.abc"},
      "user": {"userId": user_id},
    },
    "request": {
      "type": request_type,
      "requestId": "amzn1.echo-api.request.123",
      "locale": "en-US",
    },
  }
  if request_type == "IntentRequest":
    event["request"]["intent"] = {"name": intent_name}
    if slots is not None:
      event["request"]["intent"]["slots"] = slots
  return event


def makeLog(user_id="user-1", session_id="session-1", request_type="IntentRequest",
            intent_name="OrderIntent", slots=None, response="OK"):
  log = {"event": makeEvent(user_id, session_id, request_type, intent_name, slots)}
  if response is not None:
    log["response"] = response
  return log


class FakeS3Storage(object):
  '''
  In-memory stand-in for S3Storage. Reads sleep for a random short time so
  concurrent fetches complete in varying order.
  '''

  def __init__(self, objects=None, page_size=2, fail_keys=(), jitter=0.0, seed=None):
    self.bucket = "test-bucket"
    self.objects = dict(objects or {})
    self.page_size = page_size
    self.fail_keys = set(fail_keys)
    self.jitter = jitter
    self.random = random.Random(seed)
    self.reads = []
    self.puts = []

  def putObject(self, key, body):
    self.puts.append((key, body))
    self.objects[key] = body.encode("utf-8")
    return {"ETag": '"fake"'}

  def getObject(self, key):
    if self.jitter:
      time.sleep(self.random.random() * self.jitter)
    self.reads.append(key)
    if key in self.fail_keys or key not in self.objects:
      raise StorageError("Unable to read {}".format(key))
    return self.objects[key]

  def listObjectsPage(self, prefix=None, token=None):
    keys = sorted(k for k in self.objects if not prefix or k.startswith(prefix))
    start = int(token or 0)
    page = keys[start:start + self.page_size]
    next_token = None
    if start + self.page_size < len(keys):
      next_token = str(start + self.page_size)
    return page, next_token


def putLogs(storage, logs, prefix=""):
  for timestamp, log in logs.items():
    storage.objects["{}{}.txt".format(prefix, timestamp)] = json.dumps(log).encode("utf-8")


@pytest.fixture
def log_dir(tmp_path):
  directory = tmp_path / "logs"
  directory.mkdir()
  return directory


def writeLogs(directory, logs):
  for timestamp, log in logs.items():
    (directory / "{}.txt".format(timestamp)).write_text(json.dumps(log))
