'''
Builds the transcript report from stored records.
'''
import os
import time
import logging

from skill_logagg import common
from skill_logagg import aggregator
from skill_logagg import recordfetcher
from skill_logagg.errors import ConfigError, StorageError
from skill_logagg.storage import DirectoryStorage, S3Storage


def buildSource(options, s3_client=None):
  '''
  Create the record source selected by the options.

  Args:
    options: dict with either "directory" or "s3"
    s3_client: optional boto3 client handed to S3Storage

  Returns:
    DirectorySource or S3Source
  '''
  directory = options.get("directory")
  s3 = options.get("s3")
  if directory and s3:
    raise ConfigError("Only one of directory or s3 may be given")
  if directory:
    return recordfetcher.DirectorySource(DirectoryStorage(directory))
  if s3 is not None:
    if not s3.get("bucket"):
      raise ConfigError("Missing parameters")
    storage = S3Storage(s3["bucket"], region=s3.get("region"), client=s3_client)
    return recordfetcher.S3Source(storage, prefix=s3.get("keyPrefix"))
  raise ConfigError("Unsupported file access option")


def processLogs(options, result_file, s3_client=None):
  '''
  Aggregate stored records into a report file.

  Any existing file at result_file is replaced.

  Args:
    options: dict with "directory" or "s3": {"bucket", "region", "keyPrefix"},
      and optionally "daterange": {"start", "end"}, "policy", "timezone"
      and "concurrency"
    result_file: path of the report to write
    s3_client: optional boto3 client, used in place of a new one

  Returns:
    dict with "last" (timestamp of the newest record, or None), "records"
    and "skipped" counts

  Raises:
    ConfigError, StorageError, ParseError
  '''
  logger = logging.getLogger('pipeline')
  if not options or not result_file:
    raise ConfigError("Missing parameters")
  source = buildSource(options, s3_client=s3_client)
  concurrency = options.get("concurrency")
  if concurrency is None:
    concurrency = common.CONCURRENT_REQUESTS
  policy = recordfetcher.resolvePolicy(source, policy=options.get("policy"), concurrency=concurrency)
  tz_name = options.get("timezone") or common.DEFAULT_TIMEZONE
  common.checkTimezone(tz_name)
  t_start = time.time()

  output = DirectoryStorage(os.path.dirname(result_file) or ".")
  name = os.path.basename(result_file)
  try:
    if output.exists(name):
      output.delete(name)
  except OSError as e:
    raise StorageError("Unable to remove {}".format(result_file), cause=e) from e

  result = recordfetcher.fetchRecords(source,
                                      daterange=options.get("daterange"),
                                      policy=policy,
                                      concurrency=concurrency)
  text = aggregator.aggregate(result.records, tz_name=tz_name)
  try:
    output.writeText(name, text)
  except OSError as e:
    raise StorageError("Unable to write {}".format(result_file), cause=e) from e
  logger.info("Wrote %s in %.4f sec", result_file, time.time() - t_start)
  return {"last": result.last, "records": len(result.records), "skipped": result.skipped}
