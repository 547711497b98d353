'''
Constants, methods, etc common across the log aggregation package
'''
import os
import time
import logging
import datetime
import configparser
import dateparser
from pytz import timezone, UnknownTimeZoneError

from skill_logagg.errors import ConfigError

#Default location of configuration file
DEFAULT_CONFIG_FILE = "/etc/skill_logagg/logagg.ini"

DEFAULT_REGION = "us-east-1"
DEFAULT_TIMEZONE = "UTC"
RECORD_EXTENSION = ".txt"
INTENT_REQUEST = "IntentRequest"
SLOT_VALUES = "slotValues"  #field holding encoded slot text in redacted events
CONCURRENT_REQUESTS = 10  #max number of concurrent fetches to run

CONFIG_STORAGE_SECTION = "storage"
CONFIG_REPORT_SECTION = "report"
DEFAULT_CONFIG = {
  CONFIG_STORAGE_SECTION: {
    "bucket": None,
    "region": DEFAULT_REGION,
    "key_prefix": None,
    "directory": None,
  },
  CONFIG_REPORT_SECTION: {
    "timezone": DEFAULT_TIMEZONE,
    "concurrency": CONCURRENT_REQUESTS,
    "policy": None,
  },
}

EPOCH = datetime.datetime(1970, 1, 1, tzinfo=timezone('UTC'))


def loadConfig(config_file=DEFAULT_CONFIG_FILE):
  '''
  Load configuration details from an ini config file.

  Sections and keys not present in the file keep their default values.

  Args:
    config_file: path to an ini config file

  Returns:
    dict of section name to dict of settings
  '''
  logger = logging.getLogger('common')
  config = {section: dict(values) for section, values in DEFAULT_CONFIG.items()}
  if config_file is None or not os.path.exists(config_file):
    logger.debug("No configuration file at %s, using defaults", config_file)
    return config
  parser = configparser.ConfigParser()
  logger.debug("Loading configuration from %s", config_file)
  parser.read(config_file)
  for section, values in config.items():
    for key, value in values.items():
      values[key] = parser.get(section, key, fallback=value)
  config[CONFIG_REPORT_SECTION]["concurrency"] = int(config[CONFIG_REPORT_SECTION]["concurrency"])
  return config


def textToDateTime(txt, default_tz='UTC'):
  '''
  Convert plain text to a timezone aware datetime instance.

  e.g.: "now", "yesterday", "1 year ago", "10 days from now", "2:30pm"
  Args:
    txt: Textual representation of a dateTime
    default_tz: Timezone to use when it can't be figured out.

  Returns:
    Timezone aware instance of DateTime, or None if txt can't be parsed
  '''
  logger = logging.getLogger('common')
  d = dateparser.parse(txt, settings={'RETURN_AS_TIMEZONE_AWARE': True})
  if d is None:
    logger.error("Unable to convert '%s' to a date time.", txt)
    return d
  if d.tzinfo is None or d.tzinfo.utcoffset(d) is None:
    logger.warning('No timezone information specified, assuming %s', default_tz)
    return timezone(default_tz).localize(d)
  return d


def dateTimeToMillis(dt):
  return int(round((dt - EPOCH).total_seconds() * 1000))


def millisToDateTime(millis, tz_name=DEFAULT_TIMEZONE):
  return datetime.datetime.fromtimestamp(millis / 1000.0, tz=timezone(tz_name))


def checkTimezone(tz_name):
  '''
  Raises:
    ConfigError if tz_name is not a known timezone name
  '''
  try:
    timezone(tz_name)
  except UnknownTimeZoneError as e:
    raise ConfigError("Unknown timezone: {}".format(tz_name)) from e


def formatTimestamp(millis, tz_name=DEFAULT_TIMEZONE):
  '''
  Human readable rendering of an epoch millis value.

  e.g.: "Sun Aug 06 2017 05:00:00 GMT+0000 (UTC)"
  '''
  d = millisToDateTime(millis, tz_name)
  return d.strftime("%a %b %d %Y %H:%M:%S GMT%z (%Z)")


def nowMillis():
  return int(time.time() * 1000)


def timestampFromName(name, prefix=None, extension=RECORD_EXTENSION):
  '''
  Recover the epoch millis timestamp encoded in a record file or key name.

  Args:
    name: file name or object key, e.g. "logs/1501995600000.txt"
    prefix: key prefix to strip, if any
    extension: file extension to strip

  Returns:
    integer timestamp, or None if the name does not carry one
  '''
  if prefix and name.startswith(prefix):
    name = name[len(prefix):]
  if name.endswith(extension):
    name = name[:-len(extension)]
  try:
    return int(name)
  except ValueError:
    return None


def inDateRange(timestamp, daterange=None):
  '''
  Test a timestamp against an optional date range.

  Both bounds are exclusive and independently optional.

  Args:
    timestamp: epoch millis
    daterange: None or dict with optional "start" and "end" epoch millis

  Returns:
    Boolean
  '''
  if not daterange:
    return True
  start = daterange.get("start")
  end = daterange.get("end")
  if start is not None and timestamp <= start:
    return False
  if end is not None and timestamp >= end:
    return False
  return True
