# app.py
"""
CRE Contact Tracker - CSV ingestion
-----------------------------------
Usage example:
 python app.py exports/companies.csv exports/properties.csv --data-dir data/ --out out/
"""
import argparse
import logging

from config import DATA_DIR, LOG_LEVEL
from ingest.orchestrator import IngestOrchestrator
from io_utils.readers import CsvUpload
from io_utils.store import JsonFileStore
from io_utils.writers import write_collections

def main(argv=None):
   parser = argparse.ArgumentParser(description="CRE Contact Tracker - CSV ingestion")
   parser.add_argument("files", nargs="*", help="CSV exports to ingest as one batch")
   parser.add_argument("--data-dir", type=str, default=str(DATA_DIR), help="Directory holding the JSON store")
   parser.add_argument("--out", type=str, required=False, help="Export llcs/clients/properties CSVs here")
   parser.add_argument("--reset", action="store_true", help="Clear stored data before ingesting")
   args = parser.parse_args(argv)
   logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
# ---- Load ----
   orchestrator = IngestOrchestrator(JsonFileStore(args.data_dir))
   if args.reset:
       orchestrator.reset()
       print("🧹 Stored data cleared.")
# ---- Ingest ----
   report = None
   if args.files:
       uploads = []
       for path in args.files:
           try:
               uploads.append(CsvUpload.from_path(path))
           except OSError as e:
               print(f"⚠️ Could not open {path}: {e}")
       report = orchestrator.ingest_batch(uploads)
       for f in report.files:
           print(f"📄 {f.name} ({f.kind}): {f.processed} processed, {f.skipped} skipped")
       print(("✅ " if report.committed else "❌ ") + report.status)
   print(f"🏢 LLCs: {len(orchestrator.llcs)}  👥 Clients: {len(orchestrator.clients)}  🏠 Properties: {len(orchestrator.properties)}")
# ---- Export ----
   if args.out:
       write_collections(orchestrator.snapshot(), args.out)
       print(f"💾 Exported collections to {args.out}.")
   return 0 if report is None or report.committed else 1

if __name__ == "__main__":
   raise SystemExit(main())
