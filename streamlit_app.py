import streamlit as st
import pandas as pd
import time
import logging

# Suppress tornado WebSocketClosedError logs
logging.getLogger("tornado.application").setLevel(logging.ERROR)

from config import DATA_DIR, LOG_LEVEL, PAGE_SIZE
from ingest.orchestrator import IngestOrchestrator
from io_utils.readers import CsvUpload
from io_utils.store import JsonFileStore
from io_utils.views import client_properties, paginate, search_clients, search_llcs, search_properties
from io_utils.writers import to_frame

logging.basicConfig(level=LOG_LEVEL)

st.set_page_config(layout="wide", page_title="CRE Agent Dashboard")
st.title("🏢 CRE Agent Dashboard")

if "orchestrator" not in st.session_state:
    st.session_state["orchestrator"] = IngestOrchestrator(JsonFileStore(DATA_DIR))
orchestrator: IngestOrchestrator = st.session_state["orchestrator"]

st.sidebar.header("📁 Upload CSV Data")
uploaded_files = st.sidebar.file_uploader(
    "Property, company, contact or project exports", type=["csv"], accept_multiple_files=True
)

if st.sidebar.button("🚀 Import Files"):
    if uploaded_files:
        with st.spinner("Importing and reconciling records..."):
            start = time.time()
            uploads = [CsvUpload(name=f.name, data=f.getvalue()) for f in uploaded_files]
            report = orchestrator.ingest_batch(uploads)
            elapsed = time.time() - start
        st.session_state["last_report"] = report
        st.session_state["last_elapsed"] = elapsed
    else:
        st.sidebar.warning("⚠️ Choose at least one CSV file first.")

if st.sidebar.button("🧹 Clear All Data"):
    orchestrator.reset()
    st.session_state.pop("last_report", None)

# ---- STATUS ----
report = st.session_state.get("last_report")
if report is not None:
    if report.committed:
        st.success(f"✅ {report.status}")
        st.info(f"⏱️ Import took {st.session_state.get('last_elapsed', 0):.2f} seconds")
    else:
        st.error(f"❌ {report.status}")
    if report.files:
        st.dataframe(pd.DataFrame([vars(f) for f in report.files]))

data = orchestrator.snapshot()


def paged(label, items, key):
    """Render pagination controls and return the current page's items."""
    total_pages = paginate(items, 1, PAGE_SIZE).total_pages
    page_no = st.number_input(
        f"Page (of {total_pages})", min_value=1, max_value=total_pages, value=1, step=1, key=key
    )
    page = paginate(items, int(page_no), PAGE_SIZE)
    st.caption(f"{label}: {len(items)} match(es), page {page.page} of {page.total_pages}")
    return page.items


overview_tab, llc_tab, client_tab, property_tab = st.tabs(
    [
        "📊 Overview",
        f"🏷️ LLCs ({len(data.llcs)})",
        f"👥 Clients ({len(data.clients)})",
        f"🏠 Properties ({len(data.properties)})",
    ]
)

with overview_tab:
    col1, col2, col3 = st.columns(3)
    col1.metric("Total LLCs", len(data.llcs))
    col2.metric("Total Clients", len(data.clients))
    col3.metric("Total Properties", len(data.properties))

with llc_tab:
    query = st.text_input("🔍 Search LLCs...", key="llc_search")
    matches = search_llcs(data.llcs, query)
    st.dataframe(to_frame(paged("LLCs", matches, "llc_page")))
    st.download_button("⬇️ Download LLCs CSV", to_frame(data.llcs).to_csv(index=False), "llcs.csv")

with client_tab:
    query = st.text_input("🔍 Search clients...", key="client_search")
    matches = search_clients(data.clients, data.properties, query)
    for client in paged("Clients", matches, "client_page"):
        owned = client_properties(client, data.properties)
        with st.expander(f"{client.name} ({len(owned)} properties)"):
            st.write(f"**Contact:** {client.contact or 'N/A'}")
            st.write(f"**Phone:** {client.phone or 'N/A'}  **Email:** {client.email or 'N/A'}")
            st.write(f"**Last Contact:** {client.last_contact or 'N/A'}  **Next Follow-up:** {client.next_follow_up or 'N/A'}")
            for prop in owned:
                st.write(f"🏠 {prop.address} ({prop.type or 'N/A'})")
    st.download_button("⬇️ Download Clients CSV", to_frame(data.clients).to_csv(index=False), "clients.csv")

with property_tab:
    query = st.text_input("🔍 Search properties...", key="property_search")
    matches = search_properties(data.properties, query)
    st.dataframe(to_frame(paged("Properties", matches, "property_page")))
    st.download_button("⬇️ Download Properties CSV", to_frame(data.properties).to_csv(index=False), "properties.csv")
