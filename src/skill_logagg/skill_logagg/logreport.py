'''
Command line access to the voice skill log store.

  process   aggregate stored records into a transcript report
  save      store one event / response pair

Settings not given on the command line are read from the configuration file,
an ini file with [storage] and [report] sections:

  [storage]
  bucket = my-skill-logs
  region = us-west-2
  key_prefix = skill/

  [report]
  timezone = America/Los_Angeles
  concurrency = 20
'''
import os
import sys
import json
import logging
import argparse

from skill_logagg import common
from skill_logagg.errors import ConfigError, LogAggError
from skill_logagg.pipeline import processLogs
from skill_logagg.recordwriter import saveLog


def _dateRange(args, tz_name):
  daterange = {}
  for arg, bound in ((args.datestart, "start"), (args.dateend, "end")):
    if arg is None:
      continue
    d = common.textToDateTime(arg, default_tz=tz_name)
    if d is None:
      raise ConfigError("Unable to parse date: {}".format(arg))
    daterange[bound] = common.dateTimeToMillis(d)
  return daterange


def processCommand(args, config):
  storage = config[common.CONFIG_STORAGE_SECTION]
  report = config[common.CONFIG_REPORT_SECTION]
  options = {
    "timezone": report["timezone"],
    "concurrency": report["concurrency"],
    "policy": args.policy or report["policy"],
    "daterange": _dateRange(args, report["timezone"]),
  }
  directory = args.directory or storage["directory"]
  bucket = args.bucket or storage["bucket"]
  if directory:
    options["directory"] = directory
  elif bucket:
    options["s3"] = {"bucket": bucket,
                     "region": args.region or storage["region"],
                     "keyPrefix": args.prefix or storage["key_prefix"],
                     }
  logging.info("Processing logs into %s", args.output)
  result = processLogs(options, args.output)
  print(json.dumps(result))
  return 0


def saveCommand(args, config):
  storage = config[common.CONFIG_STORAGE_SECTION]
  if args.event is None:
    logging.error("An event file is required")
    return 1
  with open(args.event, "r") as event_file:
    event = json.load(event_file)
  response = None
  if args.response is not None:
    with open(args.response, "r") as response_file:
      response = response_file.read()
    try:
      response = json.loads(response)
    except ValueError:
      pass # plain text response
  options = {"bucket": args.bucket or storage["bucket"],
             "region": args.region or storage["region"],
             "keyPrefix": args.prefix or storage["key_prefix"],
             "fullLog": args.full,
             "encodeSlots": args.encode_slots,
             }
  ack = saveLog(event, response, options)
  logging.debug("Save response: %s", ack)
  return 0


def main(argv=None):
  commands = {
    "process": processCommand,
    "save": saveCommand,
  }
  parser = argparse.ArgumentParser(description=__doc__,
    formatter_class=argparse.RawDescriptionHelpFormatter)
  parser.add_argument('-l', '--log_level',
                      action='count',
                      default=0,
                      help='Set logging level, multiples for more detailed.')
  parser.add_argument("-c", "--config",
                      default=common.DEFAULT_CONFIG_FILE,
                      help="Configuration file.")
  parser.add_argument("-d", "--directory",
                      default=None,
                      help="Read records from this directory instead of S3")
  parser.add_argument("-b", "--bucket",
                      default=None,
                      help="S3 bucket holding the records")
  parser.add_argument("-p", "--prefix",
                      default=None,
                      help="Key prefix of the records in the bucket")
  parser.add_argument("-r", "--region",
                      default=None,
                      help="AWS region of the bucket")
  parser.add_argument("-S", "--datestart",
                      default=None,
                      help="Only include records after this date")
  parser.add_argument("-E", "--dateend",
                      default=None,
                      help="Only include records before this date")
  parser.add_argument("--policy",
                      default=None,
                      choices=["failfast", "besteffort"],
                      help="How to treat records that can't be read")
  parser.add_argument("-o", "--output",
                      default="summary.csv",
                      help="Report file to write (summary.csv)")
  parser.add_argument("-e", "--event",
                      default=None,
                      help="JSON event file to save")
  parser.add_argument("--response",
                      default=None,
                      help="Response file to save with the event")
  parser.add_argument("--full",
                      action="store_true",
                      help="Save the complete event rather than the redacted form")
  parser.add_argument("--encode-slots",
                      action="store_true",
                      help="Save slot values as compact text")
  parser.add_argument('command',
                      nargs='?',
                      default="process",
                      help="Operation to perform ({})".format(", ".join(commands.keys())))
  args = parser.parse_args(argv)
  # Setup logging verbosity
  levels = [logging.WARNING, logging.INFO, logging.DEBUG]
  level = levels[min(len(levels) - 1, args.log_level)]
  logging.basicConfig(level=level,
                      format="%(asctime)s %(name)s %(levelname)s: %(message)s")

  if args.command not in commands.keys():
    logging.error("Unknown command: %s", args.command)
    return 1
  if args.config != common.DEFAULT_CONFIG_FILE and not os.path.exists(args.config):
    logging.error("Configuration file not found: %s", args.config)
    return 1
  config = common.loadConfig(args.config)
  try:
    return commands[args.command](args, config)
  except LogAggError as e:
    logging.error(e)
    return 1


if __name__ == "__main__":
  sys.exit(main())
