'''
Groups fetched records by user and session and renders them as a transcript.

The report has one block per user:

  amzn1.ask.account.XYZ
  ,Sun Aug 06 2017 05:00:00 GMT+0000 (UTC)
  ,,"LaunchRequest","","Welcome! What would you like?"
  ,,"OrderIntent","{""Item"":{""name"":""Item"",""value"":""pizza""}}","One pizza."

Each session line carries the time of the session's first utterance.
'''
import json
import logging
import collections

from skill_logagg import common

NO_RESPONSE = "NO RESPONSE"

Utterance = collections.namedtuple("Utterance", ["intent", "response", "slots", "timestamp"])


class SlotRepresentation(object):
  '''
  Slot data of a record, either the raw slot mapping, the encoded text
  written by the slot encoding variant of the writer, or absent.
  '''

  RAW = "raw"
  ENCODED = "encoded"
  ABSENT = "absent"

  def __init__(self, kind, value=None):
    self.kind = kind
    self.value = value


  @classmethod
  def fromIntent(cls, intent):
    if not intent:
      return cls(cls.ABSENT)
    if isinstance(intent.get(common.SLOT_VALUES), str):
      return cls(cls.ENCODED, intent[common.SLOT_VALUES])
    if intent.get("slots") is not None:
      return cls(cls.RAW, intent["slots"])
    return cls(cls.ABSENT)


  def __bool__(self):
    return self.kind != SlotRepresentation.ABSENT


  def __eq__(self, other):
    return isinstance(other, SlotRepresentation) and \
      (self.kind, self.value) == (other.kind, other.value)


  def __repr__(self):
    return "SlotRepresentation({}, {!r})".format(self.kind, self.value)


  def render(self):
    if self.kind == SlotRepresentation.RAW:
      return json.dumps(self.value, separators=(",", ":"))
    if self.kind == SlotRepresentation.ENCODED:
      return self.value
    return ""


def quoteField(text):
  return '"' + text.replace('"', '""') + '"'


def toUtterance(record):
  '''
  Summarize a fetched record for the report.

  Args:
    record: FetchedRecord

  Returns:
    Utterance
  '''
  request = record.event.get("request") or {}
  intent = request.get("intent") or {}
  name = request.get("type", "")
  if name == common.INTENT_REQUEST and intent.get("name"):
    name = intent["name"]
  response = record.response
  if not response:
    response = NO_RESPONSE
  elif not isinstance(response, str):
    response = json.dumps(response, separators=(",", ":"))
  return Utterance(intent=name,
                   response=response,
                   slots=SlotRepresentation.fromIntent(intent),
                   timestamp=record.timestamp)


def groupRecords(records):
  '''
  Group records by userId, then sessionId.

  Utterances are kept in the order the records are given.

  Returns:
    OrderedDict of userId to OrderedDict of sessionId to list of Utterance
  '''
  users = collections.OrderedDict()
  for record in records:
    session = record.event.get("session") or {}
    user_id = (session.get("user") or {}).get("userId", "")
    session_id = session.get("sessionId", "")
    sessions = users.setdefault(user_id, collections.OrderedDict())
    sessions.setdefault(session_id, []).append(toUtterance(record))
  return users


def renderReport(users, tz_name=common.DEFAULT_TIMEZONE):
  '''
  Render grouped utterances as delimited text.

  Users and sessions with an empty id are left out of the report.

  Args:
    users: grouping as returned by groupRecords
    tz_name: timezone name used for the session date lines

  Returns:
    report text
  '''
  lines = []
  for user_id, sessions in users.items():
    if not user_id:
      continue
    lines.append(user_id)
    for session_id, utterances in sessions.items():
      if not session_id:
        continue
      utterances.sort(key=lambda utterance: utterance.timestamp)
      lines.append("," + common.formatTimestamp(utterances[0].timestamp, tz_name))
      for utterance in utterances:
        lines.append(",," + ",".join([quoteField(utterance.intent),
                                       quoteField(utterance.slots.render()),
                                       quoteField(utterance.response)]))
  return "".join(line + "\n" for line in lines)


def aggregate(records, tz_name=common.DEFAULT_TIMEZONE):
  logger = logging.getLogger('aggregator')
  users = groupRecords(records)
  logger.info("Aggregated %d records for %d users", len(records), len(users))
  return renderReport(users, tz_name=tz_name)
