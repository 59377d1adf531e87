import pytest

from matching.schema import SchemaKind
from merge.models import LLC, Client, Collections, Property
from merge.rows import RowProcessor, display_address, is_plausible_company


@pytest.fixture
def working():
    return Collections()


@pytest.fixture
def processor(working, today):
    return RowProcessor(working, source="upload.csv", today=today)


# --------- helpers ---------
def test_is_plausible_company():
    assert is_plausible_company("Acme LLC")
    assert is_plausible_company("AB")
    assert not is_plausible_company("A")
    assert not is_plausible_company("!!")
    assert not is_plausible_company("(blank)")
    assert not is_plausible_company("@acme")


def test_display_address():
    assert display_address("100 Main St", "Franklin") == "100 Main St, Franklin, TN"
    assert display_address("100 Main St") == "100 Main St, Nashville, TN"
    assert display_address("100 Main St, Nashville, TN", "Franklin") == "100 Main St, Nashville, TN"


# --------- company ---------
def test_company_row_creates_llc_and_client(processor, working):
    assert processor.process_company_row({"companykey": "1", "company": "Acme LLC", "phone": "615-111-2222"})
    assert [(l.id, l.name, l.phone) for l in working.llcs] == [(1, "Acme LLC", "615-111-2222")]
    client = working.clients[0]
    assert (client.id, client.name, client.llc_id, client.property_ids) == (1, "Acme LLC", 1, [])
    assert client.last_contact == "2025-05-20"
    assert client.next_follow_up == "2025-05-27"


def test_company_row_rejects_artifact_names(processor, working):
    assert not processor.process_company_row({"company": ""})
    assert not processor.process_company_row({"company": "(none)"})
    assert not processor.process_company_row({"company": "@handle"})
    assert not processor.process_company_row({"company": "X"})
    assert working.llcs == [] and working.clients == []


def test_company_row_matches_normalized_name_and_backfills(processor, working):
    working.llcs.append(LLC(id=4, name="Acme, LLC", phone=""))
    processor.process_company_row({"company": "ACME LLC", "phone": "615-111-2222"})
    assert len(working.llcs) == 1
    assert working.llcs[0].phone == "615-111-2222"
    assert working.clients[0].llc_id == 4


def test_company_row_never_overwrites_phone(processor, working):
    working.llcs.append(LLC(id=1, name="Acme LLC", phone="615-555-0100"))
    processor.process_company_row({"company": "Acme LLC", "phone": ""})
    processor.process_company_row({"company": "Acme LLC", "phone": "615-555-9999"})
    assert working.llcs[0].phone == "615-555-0100"
    assert len(working.clients) == 1


def test_company_row_uses_follow_up_columns(processor, working):
    processor.process_company_row({"company": "Acme LLC", "lastcontact": "2025-01-02", "nextfollowup": "2025-02-03"})
    assert working.clients[0].last_contact == "2025-01-02"
    assert working.clients[0].next_follow_up == "2025-02-03"


# --------- property ---------
def test_property_row_creates_llc_and_property(processor, working):
    row = {"address": "100 Main St", "city": "Franklin", "owner": "Main Street Partners",
           "ownerphone": "615-333-4444", "value": "$1,000,000", "sqft": "5,000", "type": "Office"}
    assert processor.process_property_row(row)
    llc = working.llcs[0]
    assert (llc.name, llc.phone) == ("Main Street Partners", "615-333-4444")
    prop = working.properties[0]
    assert prop.address == "100 Main St, Franklin, TN"
    assert (prop.owner, prop.value, prop.sqft, prop.type, prop.llc_id) == (
        "Main Street Partners", "$1,000,000", "5,000", "Office", llc.id)
    assert prop.source == "upload.csv"


def test_property_row_keeps_address_with_comma(processor, working):
    processor.process_property_row({"address": "100 Main St, Nashville, TN", "owner": "Acme LLC"})
    assert working.properties[0].address == "100 Main St, Nashville, TN"


def test_property_row_requires_address_and_owner(processor, working):
    assert not processor.process_property_row({"address": "1 Main St"})
    assert not processor.process_property_row({"owner": "Acme LLC"})
    assert working.properties == [] and working.llcs == []


def test_property_row_falls_back_to_property_name(processor, working):
    assert processor.process_property_row({"propertyname": "Acme Tower", "owner": "Acme LLC"})
    assert working.properties[0].address == "Acme Tower, Nashville, TN"
    assert processor.process_property_row({"propertyname": "Solo Plaza", "address": "9 Side St"})
    assert working.llcs[-1].name == "Solo Plaza"


def test_property_row_backfills_but_never_overwrites_llc(processor, working):
    working.llcs.append(LLC(id=1, name="Acme LLC", phone="615-555-0100", email=""))
    processor.process_property_row({"address": "1 A St", "owner": "acme llc",
                                    "ownerphone": "615-555-9999", "owneremail": "ops@acme.com"})
    assert working.llcs[0].phone == "615-555-0100"
    assert working.llcs[0].email == "ops@acme.com"
    assert working.properties[0].llc_id == 1


def test_property_row_reingestion_does_not_duplicate(processor, working):
    row = {"address": "1 A St", "owner": "Acme LLC"}
    processor.process_property_row(row)
    processor.process_property_row(dict(row, value="$10"))
    assert len(working.properties) == 1
    assert working.properties[0].value == "$10"


def test_property_row_derives_status_from_mls(processor, working):
    processor.process_property_row({"address": "1 A St", "owner": "Acme LLC", "mlsstatus": "Active"})
    assert working.properties[0].status == "Available"


def test_property_ids_continue_from_max(processor, working):
    working.properties.append(Property(id=7, address="x", llc_id=1))
    working.llcs.append(LLC(id=1, name="Other"))
    processor.process_property_row({"address": "1 A St", "owner": "Acme LLC"})
    assert working.properties[-1].id == 8
    assert working.llcs[-1].id == 2


# --------- contact ---------
def test_contact_row_overwrites_contact_and_backfills(processor, working):
    working.llcs.append(LLC(id=1, name="Acme LLC", contact="Old Name", phone="615-555-0100"))
    assert processor.process_contact_row({"firstname": "Jane", "lastname": "Doe", "company": "ACME LLC",
                                          "phone": "615-555-9999", "email": "jane@acme.com"})
    llc = working.llcs[0]
    assert (llc.contact, llc.phone, llc.email) == ("Jane Doe", "615-555-0100", "jane@acme.com")


def test_contact_row_creates_llc_for_unknown_company(processor, working):
    processor.process_contact_row({"name": "Mike Wilson", "company": "Music City Properties"})
    assert [(l.name, l.contact) for l in working.llcs] == [("Music City Properties", "Mike Wilson")]
    assert working.clients == []


def test_contact_row_without_name_or_company_is_skipped(processor, working):
    assert not processor.process_contact_row({"email": "x@y.com"})
    assert processor.process_contact_row({"name": "Loner"})
    assert working.llcs == []


# --------- project ---------
def test_project_row_overwrites_llc_contact_fields(processor, working):
    working.llcs.append(LLC(id=1, name="Acme LLC", contact="Old", phone="615-555-0100", email="old@acme.com"))
    processor.process_project_row({"projectname": "HQ", "clientcompany": "Acme LLC",
                                   "clientphone": "615-555-9999", "clientcontact": ""})
    llc = working.llcs[0]
    assert (llc.contact, llc.phone, llc.email) == ("Old", "615-555-9999", "old@acme.com")


def test_project_row_creates_property_for_listing(processor, working):
    processor.process_project_row({"projectname": "HQ", "clientcompany": "Acme LLC",
                                   "listingname": "Acme Tower", "city": "Franklin"})
    prop = working.properties[0]
    assert (prop.address, prop.owner, prop.llc_id) == ("Acme Tower, Franklin", "Acme LLC", working.llcs[0].id)


def test_project_row_listing_without_company_is_skipped(processor, working):
    assert not processor.process_project_row({"projectname": "HQ", "listingname": "Acme Tower"})
    assert working.properties == []
    assert processor.process_project_row({"projectname": "HQ"})
    assert not processor.process_project_row({"listingname": "Acme Tower"})


def test_process_rows_dispatches_and_counts(processor, working):
    rows = [{"company": "Acme LLC"}, {"company": ""}, {"company": "Beta Corp"}]
    counts = processor.process_rows(SchemaKind.COMPANY, rows)
    assert (counts.processed, counts.skipped) == (2, 1)
    assert [c.name for c in working.clients] == ["Acme LLC", "Beta Corp"]
    assert isinstance(working.clients[0], Client)
