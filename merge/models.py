# merge/models.py
"""Relational model: LLCs own Properties, each LLC is represented by a Client."""
from __future__ import annotations

import copy
import json
import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class LLC:
    id: int
    name: str
    contact: str = ""
    email: str = ""
    phone: str = ""


@dataclass
class Client:
    id: int
    name: str
    contact: str = ""
    email: str = ""
    phone: str = ""
    llc_id: int = 0
    property_ids: List[int] = field(default_factory=list)
    last_contact: str = ""
    next_follow_up: str = ""


@dataclass
class Property:
    id: int
    address: str
    owner: str = ""
    value: str = ""
    sqft: str = ""
    type: str = ""
    status: str = ""
    source: str = ""
    llc_id: int = 0


CONTACT_FIELDS = ("contact", "email", "phone")


def next_id(records: Iterable[Any]) -> int:
    """max(id) + 1, or 1 for an empty collection."""
    return max((r.id for r in records), default=0) + 1


def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


def dumps(records: Iterable[Any]) -> str:
    return json.dumps([asdict(r) for r in records])


def loads(cls: Type[T], blob: Optional[str]) -> List[T]:
    """Decode a stored blob; unreadable blobs come back as an empty list."""
    if not blob:
        return []
    try:
        data = json.loads(blob)
        if not isinstance(data, list):
            raise ValueError(f"expected a list, got {type(data).__name__}")
        return [from_dict(cls, item) for item in data]
    except (AttributeError, TypeError, ValueError) as e:
        logger.warning("Could not decode stored %s records: %s", cls.__name__, e)
        return []


@dataclass
class Collections:
    llcs: List[LLC] = field(default_factory=list)
    clients: List[Client] = field(default_factory=list)
    properties: List[Property] = field(default_factory=list)

    def clone(self) -> "Collections":
        return copy.deepcopy(self)
