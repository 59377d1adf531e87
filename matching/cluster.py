# matching/cluster.py
"""
Fuzzy de-duplication of LLCs and Clients by edit distance on normalized names.

Items are visited in input order. Each item is linked to every earlier item
whose normalized name is within FUZZY_THRESHOLD edits. If the item's connected
component already holds an accepted record, the item is absorbed into the
earliest accepted one; otherwise it is accepted. The first-seen record wins and
only blank contact fields are filled from the records it absorbs.

Chains merge: with A~B and B~C but A far from C, B and C both fold into A.
Comparisons are O(n^2) within a block, fine for hundreds to low thousands of
records.
"""
import logging
import time
from typing import Callable, Dict, Hashable, List, Sequence, Tuple

import networkx as nx
from rapidfuzz.distance import Levenshtein

from config import FUZZY_THRESHOLD
from matching.normalize import normalize_name
from merge.survivorship import absorb, copy_record

logger = logging.getLogger(__name__)


def within_threshold(a: str, b: str, threshold: int = FUZZY_THRESHOLD) -> bool:
    return Levenshtein.distance(a, b, score_cutoff=threshold) <= threshold


def _fold(
    records: Sequence,
    block_of: Callable[[object], Hashable],
    threshold: int,
) -> Tuple[List, Dict[int, int]]:
    """Returns (survivors, {absorbed_id: survivor_id})."""
    G = nx.Graph()
    keys: List[str] = []
    blocks: List[Hashable] = []
    accepted: Dict[int, object] = {}  # position -> surviving copy
    remap: Dict[int, int] = {}

    for i, record in enumerate(records):
        key = normalize_name(record.name)
        block = block_of(record)
        G.add_node(i)
        for j in range(i):
            if blocks[j] == block and within_threshold(key, keys[j], threshold):
                G.add_edge(i, j)
        keys.append(key)
        blocks.append(block)

        owners = [n for n in nx.node_connected_component(G, i) if n in accepted]
        if owners:
            survivor = accepted[min(owners)]
            absorb(survivor, record)
            if record.id != survivor.id:
                remap[record.id] = survivor.id
        else:
            accepted[i] = copy_record(record)

    survivors = [accepted[i] for i in sorted(accepted)]
    return survivors, remap


def merge_llc_duplicates(llcs: Sequence, threshold: int = FUZZY_THRESHOLD):
    """
    Collapse near-duplicate LLCs.
    Returns (survivors, remap) where remap sends each dropped LLC id to the id
    of the record that absorbed it, for repointing llc_id references.
    """
    start = time.time()
    survivors, remap = _fold(llcs, lambda _: None, threshold)
    logger.info(
        "[dedupe_llcs] time: %.2fs, kept: %d, merged: %d",
        time.time() - start, len(survivors), len(llcs) - len(survivors),
    )
    return survivors, remap


def dedupe_llcs(llcs: Sequence, threshold: int = FUZZY_THRESHOLD) -> List:
    return merge_llc_duplicates(llcs, threshold)[0]


def dedupe_clients(clients: Sequence, threshold: int = FUZZY_THRESHOLD) -> List:
    """
    Collapse near-duplicate Clients. Clients only compare within the same
    llc_id, so similar names under different LLCs are kept apart.
    """
    start = time.time()
    survivors, _ = _fold(clients, lambda c: c.llc_id, threshold)
    logger.info(
        "[dedupe_clients] time: %.2fs, kept: %d, merged: %d",
        time.time() - start, len(survivors), len(clients) - len(survivors),
    )
    return survivors
