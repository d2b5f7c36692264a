import base64
from concurrent.futures import ThreadPoolExecutor

import pandas as pd
import requests
import streamlit as st

from config import BACKEND_URL
from models.chart_models import ChartType, Suggestion
from models.common_models import ParsedTable
from services.aggregation_service import build_chart_series
from services.chart_model_service import ChartModel
from services.viz_service import render_series

# ========================
# CONFIG
# ========================
BASE_URL = BACKEND_URL

st.set_page_config(
    page_title="Spreadsheet Dashboards",
    layout="wide"
)

# ========================
# STATE VARIABLES
# ========================
for key, default in {
    "files": [],
    "dashboards": [],
    "dashboard": None,
    "chart_model": None,
    "table": None,
    "suggestions": [],
}.items():
    if key not in st.session_state:
        st.session_state[key] = default


def show_error(resp: requests.Response, fallback: str):
    """Non-blocking notification with the backend's title and detail."""
    try:
        body = resp.json()
        st.error(f"**{body.get('title', fallback)}**: {body.get('detail', resp.text)}")
    except ValueError:
        st.error(f"**{fallback}**: {resp.text}")


def load_lists():
    # Files and dashboards are independent; fetch both and join.
    with ThreadPoolExecutor(max_workers=2) as pool:
        files_future = pool.submit(requests.get, f"{BASE_URL}/files")
        dash_future = pool.submit(requests.get, f"{BASE_URL}/dashboards")
        files_resp, dash_resp = files_future.result(), dash_future.result()

    if files_resp.status_code == 200:
        st.session_state.files = files_resp.json()
    else:
        show_error(files_resp, "Failed to fetch files")
    if dash_resp.status_code == 200:
        st.session_state.dashboards = dash_resp.json()
    else:
        show_error(dash_resp, "Failed to fetch dashboards")


def open_dashboard(dashboard: dict):
    st.session_state.dashboard = dashboard
    st.session_state.chart_model = ChartModel.from_config(dashboard["chart_config"])
    st.session_state.suggestions = []
    st.session_state.table = None

    if dashboard.get("file_id"):
        resp = requests.get(f"{BASE_URL}/files/{dashboard['file_id']}/table")
        if resp.status_code == 200:
            st.session_state.table = ParsedTable.model_validate(resp.json())
        else:
            show_error(resp, "Failed to load file data")


# Title
st.title("Spreadsheet Dashboards")

st.markdown("""
Upload an Excel or CSV file → create a dashboard → add charts by hand or
let the **AI** suggest them → **Save**.
""")

if not st.session_state.files and not st.session_state.dashboards:
    load_lists()

# 1. FILE UPLOAD
st.header("1. Upload a File")

uploaded_file = st.file_uploader("Upload your spreadsheet", type=["xlsx", "xls", "csv"])

if uploaded_file is not None:
    if st.button("Upload & Parse File"):
        with st.spinner("Uploading..."):
            files = {"file": (uploaded_file.name, uploaded_file.getvalue(), uploaded_file.type)}
            resp = requests.post(f"{BASE_URL}/upload/file", files=files)

            if resp.status_code != 200:
                show_error(resp, "Upload failed")
            else:
                data = resp.json()
                st.success(f"{data['file']['file_name']} has been uploaded and parsed successfully.")
                st.caption(
                    f"Sheet '{data['table']['sheetName']}': {data['table']['n_rows']} rows, "
                    f"{data['table']['n_cols']} columns"
                )
                load_lists()

# 2. FILES & DASHBOARDS
st.header("2. Your Files & Dashboards")

overview = requests.get(f"{BASE_URL}/overview")
if overview.status_code == 200:
    stats = overview.json()
    c1, c2, c3 = st.columns(3)
    c1.metric("Total Uploads", stats["uploads"])
    c2.metric("Dashboards", stats["dashboards"])
    c3.metric("Charts", stats["charts"])

left, right = st.columns(2)

with left:
    st.subheader("Files")
    for f in st.session_state.files:
        col_name, col_btn = st.columns([4, 1])
        col_name.write(f"{f['file_name']} ({f['file_size'] / 1024:.1f} KB)")
        if col_btn.button("Delete", key=f"del_file_{f['id']}"):
            resp = requests.delete(f"{BASE_URL}/files/{f['id']}")
            if resp.status_code == 200:
                st.success(f"{f['file_name']} has been removed.")
                load_lists()
                st.rerun()
            else:
                show_error(resp, "Delete failed")

with right:
    st.subheader("Dashboards")
    for d in st.session_state.dashboards:
        col_name, col_open, col_btn = st.columns([3, 1, 1])
        col_name.write(f"{d['name']} ({len(d['chart_config'])} charts)")
        if col_open.button("Open", key=f"open_{d['id']}"):
            open_dashboard(d)
        if col_btn.button("Delete", key=f"del_dash_{d['id']}"):
            resp = requests.delete(f"{BASE_URL}/dashboards/{d['id']}")
            if resp.status_code == 200:
                if st.session_state.dashboard and st.session_state.dashboard["id"] == d["id"]:
                    st.session_state.dashboard = None
                load_lists()
                st.rerun()
            else:
                show_error(resp, "Delete failed")

# 3. CREATE DASHBOARD
st.header("3. Create a Dashboard")

with st.form("create_dashboard"):
    name = st.text_input("Name")
    description = st.text_area("Description")
    file_options = {f["file_name"]: f["id"] for f in st.session_state.files}
    selected_file = st.selectbox("Data file", ["(none)"] + list(file_options))
    submitted = st.form_submit_button("Create Dashboard")

if submitted:
    payload = {
        "name": name,
        "description": description or None,
        "file_id": file_options.get(selected_file),
    }
    resp = requests.post(f"{BASE_URL}/dashboards", json=payload)
    if resp.status_code == 201:
        st.success(f'"{name}" is ready for customization.')
        load_lists()
        open_dashboard(resp.json())
    else:
        show_error(resp, "Creation failed")

# 4. DASHBOARD EDITOR
dashboard = st.session_state.dashboard
model: ChartModel = st.session_state.chart_model
table: ParsedTable = st.session_state.table

if dashboard and model is not None:
    st.header(f"4. Edit: {dashboard['name']}")

    new_name = st.text_input("Dashboard name", value=dashboard["name"], key=f"name_{dashboard['id']}")

    if st.button("Save"):
        payload = {"name": new_name, "chart_config": model.to_config()}
        resp = requests.put(f"{BASE_URL}/dashboards/{dashboard['id']}", json=payload)
        if resp.status_code == 200:
            st.session_state.dashboard = resp.json()
            st.success("Your changes have been saved.")
            load_lists()
        else:
            show_error(resp, "Update failed")

    # ---- AI suggestions ----
    if table is not None:
        st.subheader("AI Chart Suggestions")

        if st.button("Analyze Data"):
            with st.spinner("Analyzing..."):
                resp = requests.post(f"{BASE_URL}/data/suggestions", json={"file_id": dashboard["file_id"]})
                if resp.status_code == 200:
                    st.session_state.suggestions = [
                        Suggestion.model_validate(s) for s in resp.json()["suggestions"]
                    ]
                    st.info(f"Found {len(st.session_state.suggestions)} chart recommendations for your data.")
                else:
                    show_error(resp, "Failed to get suggestions")

        if st.session_state.suggestions:
            if st.button("Add All Charts"):
                added = model.apply_all_suggestions(st.session_state.suggestions)
                st.session_state.suggestions = []
                st.success(f"Added {len(added)} charts to your dashboard.")
                st.rerun()

            for i, s in enumerate(st.session_state.suggestions):
                col_text, col_btn = st.columns([5, 1])
                col_text.markdown(f"**{s.title}** ({s.type.value}) | {s.x_axis} → {s.y_axis}")
                col_text.caption(s.reason)
                if col_btn.button("Add", key=f"add_sugg_{i}"):
                    model.apply_suggestion(s)
                    st.rerun()

    # ---- Manual chart creation ----
    st.subheader("Manual Chart Creation")
    if table is None:
        st.caption("Upload a file to this dashboard to add charts.")
    else:
        type_cols = st.columns(len(ChartType))
        for col, chart_type in zip(type_cols, ChartType):
            if col.button(chart_type.value.capitalize(), key=f"add_{chart_type.value}"):
                model.add_chart(chart_type, table)
                st.rerun()

    # ---- Charts grid ----
    if not len(model):
        st.caption("No charts yet.")

    cols = st.columns(2)
    for i, chart in enumerate(model.charts):
        with cols[i % 2]:
            title = st.text_input("Title", value=chart.title, key=f"title_{chart.id}")
            if title != chart.title:
                chart = model.update_chart(chart.id, title=title)

            if st.button("Remove", key=f"rm_{chart.id}"):
                model.remove_chart(chart.id)
                st.rerun()

            if table is None:
                continue

            headers = list(dict.fromkeys(table.headers + [chart.x_axis, chart.y_axis]))
            type_values = [t.value for t in ChartType]
            c_type, c_x, c_y = st.columns(3)
            new_type = c_type.selectbox("Type", type_values, index=type_values.index(chart.type.value), key=f"type_{chart.id}")
            new_x = c_x.selectbox("X-Axis", headers, index=headers.index(chart.x_axis), key=f"x_{chart.id}")
            new_y = c_y.selectbox("Y-Axis", headers, index=headers.index(chart.y_axis), key=f"y_{chart.id}")
            if (new_type, new_x, new_y) != (chart.type.value, chart.x_axis, chart.y_axis):
                chart = model.update_chart(chart.id, type=new_type, x_axis=new_x, y_axis=new_y)

            series = build_chart_series(table, chart)
            if series.stale_axes:
                st.warning(f"Column(s) not in this file: {', '.join(series.stale_axes)}")

            img = render_series(series)
            if img:
                st.image(base64.b64decode(img), use_container_width=True)
            elif series.rows:
                st.dataframe(pd.DataFrame(series.rows), use_container_width=True)
