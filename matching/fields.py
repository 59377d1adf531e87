# matching/fields.py
"""
Header dictionaries and row extraction.

Rows arrive as {normalized_header: cleaned_value}. Two lookup styles are used:

* first_value(row, KEYS) - explicit precedence search, first non-empty wins.
* auto_map(row, DICTIONARY) - bulk mapping in column order, a later non-empty
  column overwrites an earlier one that maps to the same field.
"""
from typing import Any, Dict, Iterable, Mapping, MutableMapping

Row = Mapping[str, str]

# --------- precedence lists (normalized headers) ---------
COMPANY_NAME_KEYS = ("companyname", "company", "accountname", "organization", "organizationname", "name")
CONTACT_NAME_KEYS = ("name", "fullname", "contactname")
FIRST_NAME_KEYS = ("firstname", "contactfirstname", "ownerfirstname")
LAST_NAME_KEYS = ("lastname", "contactlastname", "ownerlastname")
CONTACT_COMPANY_KEYS = ("companyname", "company", "associatedcompany", "accountname", "organization")
PHONE_KEYS = (
    "phone", "phonenumber", "companyphone", "mainphone", "officephone", "workphone",
    "directphone", "cellphonenumber", "cellphone", "cell", "mobilephone", "mobile",
)
EMAIL_KEYS = ("email", "emailaddress", "companyemail", "workemail", "primaryemail")

ADDRESS_KEYS = ("address", "situsaddress", "propertyaddress", "streetaddress", "siteaddress")
OWNER_KEYS = ("owner", "ownername", "ownercompany", "ownerentity", "trueowner")
PROPERTY_NAME_KEYS = ("propertyname", "buildingname")
CITY_KEYS = ("city", "situscity", "propertycity")
STATE_KEYS = ("state", "situsstate", "propertystate")
OWNER_CONTACT_KEYS = ("ownercontact", "ownercontactname", "contact", "contactname")
OWNER_PHONE_KEYS = ("ownerphone", "ownerphonenumber") + PHONE_KEYS
OWNER_EMAIL_KEYS = ("owneremail", "owneremailaddress") + EMAIL_KEYS

PROJECT_NAME_KEYS = ("projectname", "project")
CLIENT_COMPANY_KEYS = ("clientcompany", "clientcompanyname", "client", "companyname", "company", "accountname")
LISTING_KEYS = ("listingname", "listing", "propertyname", "listingaddress")
PROJECT_CONTACT_KEYS = ("clientcontact", "contactname", "contact")
PROJECT_PHONE_KEYS = ("clientphone",) + PHONE_KEYS
PROJECT_EMAIL_KEYS = ("clientemail",) + EMAIL_KEYS

MLS_STATUS_KEYS = ("mlsstatus", "listingstatus")
RECORDING_DATE_KEYS = ("recordingdate", "lastsaledate")

# --------- bulk dictionaries ---------
PROPERTY_FIELD_DICTIONARY: Dict[str, str] = {
    "value": "value",
    "propertyvalue": "value",
    "marketvalue": "value",
    "totalassessedvalue": "value",
    "assessedvalue": "value",
    "salesprice": "value",
    "price": "value",
    "sqft": "sqft",
    "squarefeet": "sqft",
    "squarefootage": "sqft",
    "buildingsquarefootage": "sqft",
    "buildingsqft": "sqft",
    "rba": "sqft",
    "gla": "sqft",
    "type": "type",
    "propertytype": "type",
    "propertyuse": "type",
    "use": "type",
    "status": "status",
    "propertystatus": "status",
    "source": "source",
}

CLIENT_FIELD_DICTIONARY: Dict[str, str] = {
    "contact": "contact",
    "contactname": "contact",
    "primarycontact": "contact",
    "email": "email",
    "emailaddress": "email",
    "companyemail": "email",
    "phone": "phone",
    "phonenumber": "phone",
    "companyphone": "phone",
    "mainphone": "phone",
    "cell": "phone",
    "cellphonenumber": "phone",
    "lastcontact": "last_contact",
    "lastcontacted": "last_contact",
    "nextfollowup": "next_follow_up",
    "followupdate": "next_follow_up",
}


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def assign_if_valid(target: Any, field: str, value: Any) -> bool:
    """
    Set target[field] (or target.field) unless value is None or ''.
    Returns True when something was assigned.
    """
    if is_blank(value):
        return False
    if isinstance(target, MutableMapping):
        target[field] = value
    else:
        setattr(target, field, value)
    return True


def first_value(row: Row, keys: Iterable[str]) -> str:
    for key in keys:
        value = row.get(key)
        if not is_blank(value):
            return value
    return ""


def auto_map(row: Row, dictionary: Mapping[str, str]) -> Dict[str, str]:
    mapped: Dict[str, str] = {}
    for header, value in row.items():
        field = dictionary.get(header)
        if field:
            assign_if_valid(mapped, field, value)
    return mapped


def full_contact_name(row: Row) -> str:
    """Single name column, else first + last."""
    name = first_value(row, CONTACT_NAME_KEYS)
    if name:
        return name
    parts = [first_value(row, FIRST_NAME_KEYS), first_value(row, LAST_NAME_KEYS)]
    return " ".join(p for p in parts if p)


def determine_property_status(mls_status: str, recording_date: str) -> str:
    if not mls_status:
        return "Off Market"
    status = mls_status.lower()
    if "active" in status or "new" in status:
        return "Available"
    if "pending" in status:
        return "Pending"
    if "sold" in status or recording_date:
        return "Sold"
    return "Off Market"


def property_status(row: Row, mapped: Mapping[str, str]) -> str:
    """Explicit status column, else derived from MLS columns when the row has any."""
    if mapped.get("status"):
        return mapped["status"]
    if not any(key in row for key in MLS_STATUS_KEYS + RECORDING_DATE_KEYS):
        return ""
    return determine_property_status(first_value(row, MLS_STATUS_KEYS), first_value(row, RECORDING_DATE_KEYS))
