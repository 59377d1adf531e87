import os
from dataclasses import asdict

import pandas as pd

def ensure_outdir(outdir):
    os.makedirs(outdir, exist_ok=True)

def to_frame(records):
    rows = []
    for record in records:
        row = asdict(record)
        if "property_ids" in row:
            row["property_ids"] = ";".join(str(i) for i in row["property_ids"])
        rows.append(row)
    return pd.DataFrame(rows)

def write_collections(collections, outdir):
    ensure_outdir(outdir)
    to_frame(collections.llcs).to_csv(os.path.join(outdir, "llcs.csv"), index=False)
    to_frame(collections.clients).to_csv(os.path.join(outdir, "clients.csv"), index=False)
    to_frame(collections.properties).to_csv(os.path.join(outdir, "properties.csv"), index=False)
