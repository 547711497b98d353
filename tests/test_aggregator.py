import csv
import io

from skill_logagg.aggregator import NO_RESPONSE, SlotRepresentation, aggregate, groupRecords, \
  quoteField, toUtterance
from skill_logagg.recordfetcher import FetchedRecord

from conftest import makeLog

SLOTS = {"Item": {"name": "Item", "value": "pizza"}}


def record(timestamp, **kwargs):
  log = makeLog(**kwargs)
  return FetchedRecord(key="{}.txt".format(timestamp), timestamp=timestamp,
                       event=log["event"], response=log.get("response"))


def utteranceLines(report):
  return [line for line in report.splitlines() if line.startswith(",,")]


def test_intent_name_or_request_type():
  assert toUtterance(record(1, intent_name="OrderIntent")).intent == "OrderIntent"
  assert toUtterance(record(1, request_type="LaunchRequest")).intent == "LaunchRequest"
  assert toUtterance(record(1, request_type="SessionEndedRequest")).intent == "SessionEndedRequest"


def test_slot_representations():
  assert toUtterance(record(1, slots=SLOTS)).slots == SlotRepresentation(SlotRepresentation.RAW, SLOTS)
  assert not toUtterance(record(1)).slots
  encoded = record(1)
  encoded.event["request"]["intent"]["slotValues"] = "Item:pizza"
  assert toUtterance(encoded).slots == SlotRepresentation(SlotRepresentation.ENCODED, "Item:pizza")
  assert SlotRepresentation(SlotRepresentation.RAW, SLOTS).render() == \
    '{"Item":{"name":"Item","value":"pizza"}}'


def test_sessions_ordered_ascending():
  records = [record(1501995900000, intent_name="C"),
             record(1501995600000, intent_name="A"),
             record(1501995700000, intent_name="B")]
  report = aggregate(records)
  assert report == ("user-1\n"
                    ",Sun Aug 06 2017 05:00:00 GMT+0000 (UTC)\n"
                    ',,"A","","OK"\n'
                    ',,"B","","OK"\n'
                    ',,"C","","OK"\n')


def test_ties_keep_fetch_order():
  records = [record(100, intent_name="First"), record(100, intent_name="Second")]
  lines = utteranceLines(aggregate(records))
  assert lines == [',,"First","","OK"', ',,"Second","","OK"']


def test_grouping_by_user_and_session():
  records = [record(300, user_id="u2", session_id="s3"),
             record(200, user_id="u1", session_id="s2"),
             record(100, user_id="u1", session_id="s1"),
             record(50, user_id="u1", session_id="s2")]
  users = groupRecords(records)
  assert list(users.keys()) == ["u2", "u1"]
  assert list(users["u1"].keys()) == ["s2", "s1"]
  assert [u.timestamp for u in users["u1"]["s2"]] == [200, 50]
  lines = aggregate(records).splitlines()
  assert [line for line in lines if not line.startswith(",")] == ["u2", "u1"]
  assert len([line for line in lines if line.startswith(",") and not line.startswith(",,")]) == 3


def test_quotes_doubled():
  report = aggregate([record(1, response='He said "hi"', slots=SLOTS)])
  line = utteranceLines(report)[0]
  assert line == ',,"OrderIntent","{""Item"":{""name"":""Item"",""value"":""pizza""}}","He said ""hi"""'
  fields = next(csv.reader(io.StringIO(line)))
  assert fields[4] == 'He said "hi"'
  assert fields[3] == '{"Item":{"name":"Item","value":"pizza"}}'


def test_quote_round_trip():
  for text in ['He said "hi"', '""', 'plain', '"a","b"']:
    quoted = quoteField(text)
    assert quoted[1:-1].replace('""', '"') == text


def test_missing_response():
  assert utteranceLines(aggregate([record(1, response=None)])) == [',,"OrderIntent","","NO RESPONSE"']
  assert toUtterance(record(1, response="")).response == NO_RESPONSE


def test_structured_response():
  utterance = toUtterance(record(1, response={"outputSpeech": {"text": "Hi"}}))
  assert utterance.response == '{"outputSpeech":{"text":"Hi"}}'


def test_empty_user_excluded():
  records = [record(1, user_id=""), record(2, user_id="u1", session_id="")]
  assert aggregate(records) == "u1\n"


def test_timezone():
  report = aggregate([record(1501995600000)], tz_name="America/Los_Angeles")
  assert report.splitlines()[1] == ",Sat Aug 05 2017 22:00:00 GMT-0700 (PDT)"


def test_no_records():
  assert aggregate([]) == ""


def test_empty_slot_mapping_rendered():
  utterance = toUtterance(record(1, slots={}))
  assert utterance.slots == SlotRepresentation(SlotRepresentation.RAW, {})
  assert utteranceLines(aggregate([record(1, slots={})])) == [',,"OrderIntent","{}","OK"']
