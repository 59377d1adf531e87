# merge/reconcile.py
"""
Restore the cross-reference invariants after rows have been applied:

1. every LLC has at least one Client (synthesized from the LLC when missing);
2. every Client's property_ids lists exactly the Properties owned by its LLC.

property_ids is derived state and is rebuilt from scratch each time.
"""
import logging
from collections import defaultdict
from typing import Dict, List, Mapping

from matching.cluster import dedupe_clients
from matching.normalize import normalize_name
from merge.models import CONTACT_FIELDS, LLC, Client, Collections, Property, next_id
from merge.survivorship import absorb, copy_record

logger = logging.getLogger(__name__)


def repoint_llc_ids(collections: Collections, remap: Mapping[int, int]) -> Collections:
    """Send Client/Property llc_id references of absorbed LLCs to their survivor."""
    if not remap:
        return collections
    for record in list(collections.clients) + list(collections.properties):
        record.llc_id = remap.get(record.llc_id, record.llc_id)
    return collections


def restore_missing_llcs(collections: Collections) -> Collections:
    """
    Give stored Clients/Properties whose llc_id names no LLC an owner again.
    The LLC is recreated under the same id from the first Client's name (or
    the first Property's owner); records with no usable name are dropped.
    Fuzzy LLC dedup afterwards folds a recreated LLC into an existing match.
    """
    known = {llc.id for llc in collections.llcs}
    restored: Dict[int, LLC] = {}
    for record in list(collections.clients) + list(collections.properties):
        if record.llc_id in known or record.llc_id in restored:
            continue
        if isinstance(record, Client):
            name = record.name
            contact = {f: getattr(record, f) for f in CONTACT_FIELDS}
        else:
            name = record.owner
            contact = {}
        if normalize_name(name):
            restored[record.llc_id] = LLC(id=record.llc_id, name=name, **contact)

    owned = known | set(restored)
    clients = [c for c in collections.clients if c.llc_id in owned]
    properties = [p for p in collections.properties if p.llc_id in owned]
    dropped = len(collections.clients) - len(clients) + len(collections.properties) - len(properties)
    if restored:
        logger.warning("Restored %d missing LLC(s): %s", len(restored), sorted(restored))
    if dropped:
        logger.warning("Dropped %d record(s) referencing a missing LLC", dropped)
    return Collections(llcs=list(collections.llcs) + list(restored.values()), clients=clients, properties=properties)


def fold_properties(properties: List[Property]) -> List[Property]:
    """
    Collapse Properties that share an owning LLC and normalized address, which
    happens once absorbed LLCs have been repointed. The first one is kept.
    """
    kept: Dict[tuple, Property] = {}
    for prop in properties:
        key = (prop.llc_id, normalize_name(prop.address))
        if key in kept:
            absorb(kept[key], prop, names=("owner", "value", "sqft", "type", "status", "source"))
        else:
            kept[key] = copy_record(prop)
    return list(kept.values())


def reconcile(collections: Collections) -> Collections:
    llcs = list(collections.llcs)
    clients = [copy_record(c) for c in collections.clients]
    properties = list(collections.properties)

    represented = {c.llc_id for c in clients}
    synthesized = 0
    for llc in llcs:
        if llc.id in represented:
            continue
        clients.append(
            Client(
                id=next_id(clients),
                name=llc.name,
                contact=llc.contact,
                email=llc.email,
                phone=llc.phone,
                llc_id=llc.id,
            )
        )
        represented.add(llc.id)
        synthesized += 1

    owned: Dict[int, List[int]] = defaultdict(list)
    for prop in properties:
        owned[prop.llc_id].append(prop.id)
    for client in clients:
        client.property_ids = list(owned.get(client.llc_id, []))

    if synthesized:
        logger.info("Synthesized %d client(s) for unrepresented LLCs", synthesized)
    return Collections(llcs=llcs, clients=dedupe_clients(clients), properties=properties)
