from dataclasses import replace

from merge.models import CONTACT_FIELDS


def copy_record(record):
    """Shallow copy that does not share the property_ids list."""
    duplicate = replace(record)
    if hasattr(duplicate, "property_ids"):
        duplicate.property_ids = list(record.property_ids)
    return duplicate


def absorb(master, duplicate, names=CONTACT_FIELDS):
    """
    Fill blank contact fields on the surviving record from a dropped duplicate.
    Populated fields on the master always win.
    """
    for name in names:
        if not getattr(master, name) and getattr(duplicate, name):
            setattr(master, name, getattr(duplicate, name))
    return master
