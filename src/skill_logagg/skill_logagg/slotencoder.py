'''
Compact text encoding of intent slot values.
'''


def encodeSlots(slots):
  '''
  Flatten slots into "name:value" pairs joined with commas.

  Slots without a value are left out. Mapping order is preserved.

  Args:
    slots: dict of slot name to {"name": ..., "value": ...}

  Returns:
    encoded text, empty if no slot has a value
  '''
  entries = []
  for slot in (slots or {}).values():
    if slot.get("value") is None:
      continue
    entries.append("{}:{}".format(slot.get("name"), slot["value"]))
  return ",".join(entries)
