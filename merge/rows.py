# merge/rows.py
"""
Turn cleaned CSV rows into creates/updates against working collections.

Every handler follows the same shape: resolve the identity key, find-or-create
the parent LLC, then find-or-create (or merge into) the dependent records.
Handlers return True when the row was used and False when it was skipped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Dict, Optional

from config import DEFAULT_CITY, DEFAULT_SOURCE, DEFAULT_STATE, FOLLOW_UP_DAYS
from matching.fields import (
    ADDRESS_KEYS, CITY_KEYS, CLIENT_COMPANY_KEYS, CLIENT_FIELD_DICTIONARY, COMPANY_NAME_KEYS,
    CONTACT_COMPANY_KEYS, EMAIL_KEYS, LISTING_KEYS, OWNER_CONTACT_KEYS, OWNER_EMAIL_KEYS,
    OWNER_KEYS, OWNER_PHONE_KEYS, PHONE_KEYS, PROJECT_CONTACT_KEYS, PROJECT_EMAIL_KEYS,
    PROJECT_NAME_KEYS, PROJECT_PHONE_KEYS, PROPERTY_FIELD_DICTIONARY, PROPERTY_NAME_KEYS,
    STATE_KEYS, Row, assign_if_valid, auto_map, first_value, full_contact_name, is_blank,
    property_status,
)
from matching.normalize import normalize_name, same_name
from matching.schema import SchemaKind
from merge.models import CONTACT_FIELDS, LLC, Client, Collections, Property, next_id

logger = logging.getLogger(__name__)


@dataclass
class RowCounts:
    processed: int = 0
    skipped: int = 0

    def add(self, other: "RowCounts") -> None:
        self.processed += other.processed
        self.skipped += other.skipped


def is_plausible_company(name: str) -> bool:
    """Reject parsing artifacts: blank, one character, or '(...' / '@...' names."""
    if len(normalize_name(name)) < 2:
        return False
    return not name.lstrip().startswith(("(", "@"))


def display_address(address: str, city: str = "", state: str = "") -> str:
    """Addresses without a comma get ', <city>, <state>' appended."""
    if "," in address:
        return address
    return f"{address}, {city or DEFAULT_CITY}, {state or DEFAULT_STATE}"


def backfill(record, values: Dict[str, str], names=CONTACT_FIELDS) -> None:
    """Fill blank fields only; a populated field is never overwritten."""
    for name in names:
        if is_blank(getattr(record, name)):
            assign_if_valid(record, name, values.get(name))


def overwrite(record, values: Dict[str, str], names=CONTACT_FIELDS) -> None:
    """Overwrite fields whenever the row supplies a value."""
    for name in names:
        assign_if_valid(record, name, values.get(name))


class RowProcessor:
    """Applies rows of one schema kind to a shared set of working collections."""

    def __init__(self, working: Collections, source: str = "", today: Optional[date] = None):
        self.working = working
        self.source = source
        self.today = today or date.today()
        self._handlers: Dict[SchemaKind, Callable[[Row], bool]] = {
            SchemaKind.COMPANY: self.process_company_row,
            SchemaKind.CONTACT: self.process_contact_row,
            SchemaKind.PROJECT: self.process_project_row,
            SchemaKind.PROPERTY: self.process_property_row,
        }

    def process_rows(self, kind: SchemaKind, rows) -> RowCounts:
        handler = self._handlers[kind]
        counts = RowCounts()
        for row in rows:
            if handler(row):
                counts.processed += 1
            else:
                counts.skipped += 1
        return counts

    # --------- lookups ---------
    def _find_llc_normalized(self, name: str) -> Optional[LLC]:
        key = normalize_name(name)
        return next((l for l in self.working.llcs if normalize_name(l.name) == key), None)

    def _find_llc_exact(self, name: str) -> Optional[LLC]:
        return next((l for l in self.working.llcs if same_name(l.name, name)), None)

    def _create_llc(self, name: str, values: Dict[str, str]) -> LLC:
        llc = LLC(id=next_id(self.working.llcs), name=name)
        overwrite(llc, values)
        self.working.llcs.append(llc)
        logger.debug("Created LLC %s %r", llc.id, llc.name)
        return llc

    def _find_property(self, address: str, llc_id: int) -> Optional[Property]:
        key = normalize_name(address)
        return next(
            (p for p in self.working.properties if p.llc_id == llc_id and normalize_name(p.address) == key),
            None,
        )

    def _upsert_property(self, address: str, llc: LLC, row: Row, owner: str = "") -> Property:
        mapped = auto_map(row, PROPERTY_FIELD_DICTIONARY)
        values = {
            "owner": owner or llc.name,
            "value": mapped.get("value", ""),
            "sqft": mapped.get("sqft", ""),
            "type": mapped.get("type", ""),
            "status": property_status(row, mapped),
            "source": mapped.get("source") or self.source or DEFAULT_SOURCE,
        }
        existing = self._find_property(address, llc.id)
        if existing is not None:
            backfill(existing, values, names=tuple(values))
            return existing
        prop = Property(id=next_id(self.working.properties), address=address, llc_id=llc.id)
        overwrite(prop, values, names=tuple(values))
        self.working.properties.append(prop)
        return prop

    # --------- company ---------
    def process_company_row(self, row: Row) -> bool:
        name = first_value(row, COMPANY_NAME_KEYS)
        if not name or not is_plausible_company(name):
            logger.debug("Skipping company row without a usable name: %r", name)
            return False

        values = auto_map(row, CLIENT_FIELD_DICTIONARY)
        assign_if_valid(values, "phone", first_value(row, PHONE_KEYS))
        assign_if_valid(values, "email", first_value(row, EMAIL_KEYS))

        llc = self._find_llc_normalized(name)
        if llc is None:
            llc = self._create_llc(name, values)
        else:
            backfill(llc, values)

        key = normalize_name(name)
        client = next(
            (c for c in self.working.clients if c.llc_id == llc.id and normalize_name(c.name) == key),
            None,
        )
        if client is None:
            client = Client(
                id=next_id(self.working.clients),
                name=name,
                llc_id=llc.id,
                last_contact=values.get("last_contact") or self.today.isoformat(),
                next_follow_up=values.get("next_follow_up")
                or (self.today + timedelta(days=FOLLOW_UP_DAYS)).isoformat(),
            )
            overwrite(client, values)
            self.working.clients.append(client)
        else:
            backfill(client, values)
        return True

    # --------- property ---------
    def process_property_row(self, row: Row) -> bool:
        property_name = first_value(row, PROPERTY_NAME_KEYS)
        address = first_value(row, ADDRESS_KEYS) or property_name
        owner = first_value(row, OWNER_KEYS) or property_name
        if not address or not owner:
            logger.debug("Skipping property row: address=%r owner=%r", address, owner)
            return False

        address = display_address(address, first_value(row, CITY_KEYS), first_value(row, STATE_KEYS))
        values = {
            "contact": first_value(row, OWNER_CONTACT_KEYS),
            "email": first_value(row, OWNER_EMAIL_KEYS),
            "phone": first_value(row, OWNER_PHONE_KEYS),
        }
        llc = self._find_llc_exact(owner)
        if llc is None:
            llc = self._create_llc(owner, values)
        else:
            backfill(llc, values)

        self._upsert_property(address, llc, row, owner=owner)
        return True

    # --------- contact ---------
    def process_contact_row(self, row: Row) -> bool:
        contact = full_contact_name(row)
        company = first_value(row, CONTACT_COMPANY_KEYS)
        if not contact and not company:
            logger.debug("Skipping contact row without name or company")
            return False
        if not company:
            logger.debug("Contact %r has no company to attach to", contact)
            return True

        values = {
            "contact": contact,
            "email": first_value(row, EMAIL_KEYS),
            "phone": first_value(row, PHONE_KEYS),
        }
        llc = self._find_llc_exact(company)
        if llc is None:
            self._create_llc(company, values)
        else:
            assign_if_valid(llc, "contact", contact)
            backfill(llc, values, names=("email", "phone"))
        return True

    # --------- project ---------
    def process_project_row(self, row: Row) -> bool:
        project = first_value(row, PROJECT_NAME_KEYS)
        company = first_value(row, CLIENT_COMPANY_KEYS)
        if not project and not company:
            logger.debug("Skipping project row without project or client company")
            return False

        llc = None
        if company:
            values = {
                "contact": first_value(row, PROJECT_CONTACT_KEYS),
                "email": first_value(row, PROJECT_EMAIL_KEYS),
                "phone": first_value(row, PROJECT_PHONE_KEYS),
            }
            llc = self._find_llc_exact(company)
            if llc is None:
                llc = self._create_llc(company, values)
            else:
                overwrite(llc, values)

        listing = first_value(row, LISTING_KEYS)
        if listing:
            if llc is None:
                logger.debug("Skipping listing %r of project %r: no client company", listing, project)
                return False
            city = first_value(row, CITY_KEYS)
            address = f"{listing}, {city}" if city else listing
            self._upsert_property(address, llc, row)
        return True
