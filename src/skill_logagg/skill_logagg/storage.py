'''
Thin wrappers over the storage backends that hold the per-interaction records.

S3Storage talks to an S3 bucket through a boto3 client created for an explicit
region. DirectoryStorage serves the same records from a local directory.
'''
import os
import logging
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from skill_logagg import common
from skill_logagg.errors import StorageError

S3_API_VERSION = "2006-03-01"


class S3Storage(object):

  def __init__(self, bucket, region=None, client=None):
    '''
    Args:
      bucket: name of the bucket holding the records
      region: AWS region, defaults to common.DEFAULT_REGION
      client: pre-built boto3 S3 client, used instead of creating one
    '''
    self._L = logging.getLogger(self.__class__.__name__)
    self.bucket = bucket
    self.region = region or common.DEFAULT_REGION
    if client is None:
      client = boto3.client("s3", region_name=self.region, api_version=S3_API_VERSION)
    self.client = client


  def putObject(self, key, body):
    self._L.debug("put s3://%s/%s", self.bucket, key)
    try:
      return self.client.put_object(Bucket=self.bucket, Key=key, Body=body)
    except (BotoCoreError, ClientError) as e:
      raise StorageError("Unable to write s3://{}/{}".format(self.bucket, key), cause=e) from e


  def getObject(self, key):
    '''
    Returns:
      the object body as bytes
    '''
    try:
      data = self.client.get_object(Bucket=self.bucket, Key=key)
      return data["Body"].read()
    except (BotoCoreError, ClientError) as e:
      raise StorageError("Unable to read s3://{}/{}".format(self.bucket, key), cause=e) from e


  def listObjectsPage(self, prefix=None, token=None):
    '''
    Retrieve one page of a bucket listing.

    Args:
      prefix: only list keys starting with prefix
      token: continuation token returned with the previous page

    Returns:
      (list of keys, next continuation token or None)
    '''
    params = {"Bucket": self.bucket}
    if prefix:
      params["Prefix"] = prefix
    if token:
      params["ContinuationToken"] = token
    try:
      data = self.client.list_objects_v2(**params)
    except (BotoCoreError, ClientError) as e:
      raise StorageError("Unable to list s3://{}/{}".format(self.bucket, prefix or ""), cause=e) from e
    keys = [entry["Key"] for entry in data.get("Contents", [])]
    return keys, data.get("NextContinuationToken")


class DirectoryStorage(object):

  def __init__(self, directory):
    self._L = logging.getLogger(self.__class__.__name__)
    self.directory = directory


  def path(self, name):
    return os.path.join(self.directory, name)


  def listNames(self):
    try:
      names = os.listdir(self.directory)
    except OSError as e:
      raise StorageError("Unable to list {}".format(self.directory), cause=e) from e
    return sorted(name for name in names if os.path.isfile(self.path(name)))


  def readText(self, name):
    with open(self.path(name), "r", encoding="utf-8") as data_file:
      return data_file.read()


  def writeText(self, name, text):
    with open(self.path(name), "w", encoding="utf-8") as data_file:
      data_file.write(text)


  def exists(self, name):
    return os.path.exists(self.path(name))


  def delete(self, name):
    os.unlink(self.path(name))
