'''
Lists every record key in a bucket, following continuation tokens.
'''
import time
import logging


def listKeys(storage, prefix=None):
  '''
  Retrieve the complete key listing under a prefix.

  Pages are requested one after another, each using the continuation token
  of the previous page. A failure on any page aborts the listing and no
  partial result is returned.

  Args:
    storage: S3Storage providing listObjectsPage
    prefix: optional key prefix

  Returns:
    list of keys

  Raises:
    StorageError if any page request fails
  '''
  logger = logging.getLogger('keyenumerator')
  t_start = time.time()
  keys = []
  token = None
  pages = 0
  while True:
    page_keys, token = storage.listObjectsPage(prefix=prefix, token=token)
    pages += 1
    keys.extend(page_keys)
    logger.debug("Page %d: %d keys", pages, len(page_keys))
    if not token:
      break
  logger.info("Listed %d keys in %d pages, %.4f sec", len(keys), pages, time.time() - t_start)
  return keys
