"""Read-only helpers for the dashboard: search, pagination, lookups."""
import math
from dataclasses import dataclass
from typing import List, Sequence

from config import PAGE_SIZE
from matching.normalize import looks_like_phone, normalize_phone


@dataclass
class Page:
    items: list
    page: int
    total_pages: int


def paginate(items: Sequence, page: int = 1, per_page: int = PAGE_SIZE) -> Page:
    total_pages = max(1, math.ceil(len(items) / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, total_pages=total_pages)


def _matches(query: str, *values) -> bool:
    return any(query in (v or "").lower() for v in values)


def _phone_matches(query: str, *phones) -> bool:
    if not looks_like_phone(query):
        return False
    target = normalize_phone(query)
    return bool(target) and any(normalize_phone(p) == target for p in phones)


def client_properties(client, properties) -> List:
    ids = set(client.property_ids)
    return [p for p in properties if p.id in ids]


def search_llcs(llcs, query: str) -> List:
    q = (query or "").strip().lower()
    if not q:
        return list(llcs)
    return [
        l for l in llcs
        if _matches(q, l.name, l.contact, l.email, l.phone) or _phone_matches(q, l.phone)
    ]


def search_clients(clients, properties, query: str) -> List:
    """Matches client fields and the addresses of the client's properties."""
    q = (query or "").strip().lower()
    if not q:
        return list(clients)
    results = []
    for c in clients:
        if _matches(q, c.name, c.contact, c.email, c.phone) or _phone_matches(q, c.phone):
            results.append(c)
        elif any(_matches(q, p.address, p.type) for p in client_properties(c, properties)):
            results.append(c)
    return results


def search_properties(properties, query: str) -> List:
    q = (query or "").strip().lower()
    if not q:
        return list(properties)
    return [p for p in properties if _matches(q, p.address, p.owner, p.type, p.status, p.source)]
