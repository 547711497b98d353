'''
This package persists voice skill interaction records to durable storage and
aggregates them into per-user, per-session transcripts.

The basic workflow is:

saveLog(event, response, options)        # once per interaction
...
processLogs(options, "summary.csv")      # later, over the whole corpus

processLogs reads every stored record from a directory or an S3 bucket,
optionally restricted to a date range, groups the records by user and then
by session, orders each session chronologically and writes the result as
delimited text:

  userId
  ,<date of first utterance in session>
  ,,"<intent>","<slots>","<response>"

'''

from skill_logagg.errors import LogAggError, ConfigError, ValidationError, \
  StorageError, ReadError, ParseError
from skill_logagg.recordwriter import saveLog
from skill_logagg.pipeline import processLogs

__all__ = ["saveLog", "processLogs",
           "LogAggError", "ConfigError", "ValidationError",
           "StorageError", "ReadError", "ParseError"]
