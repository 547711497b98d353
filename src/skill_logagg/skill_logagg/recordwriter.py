'''
Persists one interaction (event plus response) as a JSON object in S3.

The object key carries the time of the write in epoch millis, e.g.
"skill/1501995600000.txt", so records can be filtered by date without
reading their contents. Two writes in the same millisecond collide.
'''
import json
import logging

from skill_logagg import common
from skill_logagg.errors import ConfigError, ValidationError
from skill_logagg.recordvalidator import validateEvent
from skill_logagg.slotencoder import encodeSlots
from skill_logagg.storage import S3Storage


def redactEvent(event, encode_slots=False):
  '''
  Strip an event down to the fields needed for reporting.

  Args:
    event: a validated event
    encode_slots: store slots as encoded text instead of the raw mapping

  Returns:
    dict with userId, sessionId, request type and intent essentials
  '''
  redacted = {
    "session": {
      "user": {"userId": event["session"]["user"]["userId"]},
      "sessionId": event["session"]["sessionId"],
    },
    "request": {
      "type": event["request"]["type"],
    },
  }
  intent = event["request"].get("intent")
  if intent:
    redacted_intent = {}
    if intent.get("name"):
      redacted_intent["name"] = intent["name"]
    if encode_slots:
      # an empty string means slots were processed and none had a value
      redacted_intent[common.SLOT_VALUES] = encodeSlots(intent.get("slots"))
    elif intent.get("slots") is not None:
      redacted_intent["slots"] = intent["slots"]
    redacted["request"]["intent"] = redacted_intent
  return redacted


def buildKey(key_prefix=None, timestamp=None):
  if timestamp is None:
    timestamp = common.nowMillis()
  return "{}{}{}".format(key_prefix or "", timestamp, common.RECORD_EXTENSION)


def saveLog(event, response, options, storage=None):
  '''
  Write a log record for one interaction.

  Args:
    event: the interaction event
    response: text or structured response returned for the event
    options: dict with "bucket" (required), "region", "keyPrefix",
      "fullLog" and "encodeSlots"
    storage: S3Storage to write to, built from options if not provided

  Returns:
    the storage backend's write acknowledgement

  Raises:
    ConfigError if no bucket is configured
    ValidationError if the event lacks a required field
    StorageError if the write fails
  '''
  logger = logging.getLogger('recordwriter')
  if not options or not options.get("bucket"):
    raise ConfigError("Missing bucket")
  error = validateEvent(event)
  if error is not None:
    raise ValidationError(error)

  key = buildKey(options.get("keyPrefix"))
  body = {"response": response}
  if options.get("fullLog"):
    body["event"] = event
  else:
    body["event"] = redactEvent(event, encode_slots=options.get("encodeSlots", False))

  if storage is None:
    storage = S3Storage(options["bucket"], region=options.get("region"))
  logger.debug("Saving %s for user %s", key, event["session"]["user"]["userId"])
  return storage.putObject(key, json.dumps(body))
