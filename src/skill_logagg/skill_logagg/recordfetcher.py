'''
Retrieves stored records from a directory or an S3 bucket.

Each source lists its entries as (name, timestamp) pairs, the timestamp being
recovered from the name once at listing time. Entries outside the requested
date range are dropped before they are read. The remaining entries are read
concurrently on a thread pool and the results joined once every read has
finished.

How a failed read is treated depends on the policy:

  FAIL_FAST    the first failure aborts the whole fetch
  BEST_EFFORT  the failed record is logged, counted and dropped

Directory sources default to FAIL_FAST, S3 sources to BEST_EFFORT.
'''
import json
import time
import asyncio
import logging
import collections
import concurrent.futures

from skill_logagg import common
from skill_logagg.errors import ConfigError, LogAggError, ParseError, ReadError
from skill_logagg.keyenumerator import listKeys

FAIL_FAST = "failfast"
BEST_EFFORT = "besteffort"
POLICIES = (FAIL_FAST, BEST_EFFORT, )

FetchedRecord = collections.namedtuple("FetchedRecord", ["key", "timestamp", "event", "response"])
FetchResult = collections.namedtuple("FetchResult", ["records", "last", "skipped"])


class DirectorySource(object):

  default_policy = FAIL_FAST

  def __init__(self, storage):
    self.storage = storage


  def listEntries(self):
    return [(name, common.timestampFromName(name)) for name in self.storage.listNames()]


  def read(self, name):
    try:
      content = self.storage.readText(name)
    except (OSError, UnicodeDecodeError) as e:
      raise ReadError("Unable to read {}".format(self.storage.path(name)), cause=e) from e
    try:
      return json.loads(content)
    except ValueError as e:
      raise ParseError(name, cause=e) from e


class S3Source(object):

  default_policy = BEST_EFFORT

  def __init__(self, storage, prefix=None):
    self.storage = storage
    self.prefix = prefix


  def listEntries(self):
    keys = listKeys(self.storage, prefix=self.prefix)
    return [(key, common.timestampFromName(key, prefix=self.prefix)) for key in keys]


  def read(self, key):
    body = self.storage.getObject(key)
    try:
      return json.loads(body.decode("utf-8"))
    except ValueError as e:
      raise ParseError(key, cause=e) from e


def _shapeProblem(log):
  '''
  Check that a stored record has the fields the report reads, with usable types.

  Returns:
    description of the first problem found, or None
  '''
  if not isinstance(log, dict) or not isinstance(log.get("event"), dict):
    return "record has no event"
  event = log["event"]
  session = event.get("session")
  if not isinstance(session, dict):
    return "event has no session"
  user = session.get("user", {})
  if not isinstance(user, dict):
    return "session user is not an object"
  for name, value in (("userId", user.get("userId", "")), ("sessionId", session.get("sessionId", ""))):
    if not isinstance(value, str):
      return "{} is not a string".format(name)
  request = event.get("request")
  if not isinstance(request, dict):
    return "event has no request"
  if not isinstance(request.get("type"), str):
    return "request type is not a string"
  intent = request.get("intent", {})
  if not isinstance(intent, dict):
    return "request intent is not an object"
  if not isinstance(intent.get("name", ""), str):
    return "intent name is not a string"
  return None


def _toRecord(key, timestamp, log):
  problem = _shapeProblem(log)
  if problem is not None:
    raise ParseError(key, cause=problem)
  return FetchedRecord(key=key, timestamp=timestamp, event=log["event"], response=log.get("response"))


def resolvePolicy(source, policy=None, concurrency=common.CONCURRENT_REQUESTS):
  '''
  Check fetch options before any record is touched.

  Returns:
    the policy to use, the source's default if none is given

  Raises:
    ConfigError for an unknown policy or a concurrency below one
  '''
  if policy is None:
    policy = source.default_policy
  if policy not in POLICIES:
    raise ConfigError("Unknown fetch policy: {}".format(policy))
  if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
    raise ConfigError("Concurrency must be a positive integer: {!r}".format(concurrency))
  return policy


def fetchRecords(source, daterange=None, policy=None, concurrency=common.CONCURRENT_REQUESTS):
  '''
  Fetch and parse every record of a source that falls in the date range.

  Args:
    source: DirectorySource or S3Source
    daterange: None or dict with optional exclusive "start" and "end" epoch millis
    policy: FAIL_FAST or BEST_EFFORT, defaults to the source's default policy
    concurrency: number of reads to run at once

  Returns:
    FetchResult with records sorted newest first, the timestamp of the newest
    record (None if there are none) and the number of skipped entries

  Raises:
    ConfigError for an unknown policy or bad concurrency
    StorageError if listing fails, or a read fails under FAIL_FAST
    ParseError if a record can't be parsed under FAIL_FAST
  '''
  logger = logging.getLogger('recordfetcher')
  policy = resolvePolicy(source, policy=policy, concurrency=concurrency)
  t_start = time.time()

  skipped = 0
  pending = []
  for key, timestamp in source.listEntries():
    if timestamp is None:
      logger.warning("Skipping %s, name does not carry a timestamp", key)
      skipped += 1
      continue
    if common.inDateRange(timestamp, daterange):
      pending.append((key, timestamp, ))
  logger.info("%d entries to fetch", len(pending))

  def _fetch(key, timestamp):
    return _toRecord(key, timestamp, source.read(key))

  async def _work(loop):
    with concurrent.futures.ThreadPoolExecutor(max_workers=concurrency) as executor:
      tasks = [loop.run_in_executor(executor, _fetch, key, timestamp) for key, timestamp in pending]
      if policy == FAIL_FAST:
        try:
          return await asyncio.gather(*tasks)
        except Exception:
          for task in tasks:
            task.cancel()
          raise
      return await asyncio.gather(*tasks, return_exceptions=True)

  # In a multithreading environment the current thread may not provide an
  # event loop. Create a new one if necessary.
  try:
    loop = asyncio.get_event_loop()
  except RuntimeError:
    logger.info("Creating new event loop.")
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
  if loop.is_closed():
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
  responses = loop.run_until_complete(_work(loop))

  records = []
  for (key, timestamp), response in zip(pending, responses):
    if isinstance(response, LogAggError):
      logger.warning("Dropping %s: %s", key, response)
      skipped += 1
    elif isinstance(response, BaseException):
      raise response
    else:
      records.append(response)

  records.sort(key=lambda record: record.timestamp, reverse=True)
  last = records[0].timestamp if records else None
  logger.info("Fetched %d records, skipped %d, %.4f sec", len(records), skipped, time.time() - t_start)
  return FetchResult(records=records, last=last, skipped=skipped)
