from __future__ import annotations

from pathlib import Path

import pandas as pd
from pandas.errors import EmptyDataError
import streamlit as st

from container_allocator import (
    CatalogConfigError,
    ShipmentInputError,
    apply_quantities,
    build_allocation_rows,
    format_report_lines,
    load_config,
    load_container_records,
    load_products_csv,
    load_products_json,
    normalize_line_items,
)
from container_allocator.config import SPLIT_MODES, TIE_BREAK_POLICIES
from container_allocator.planner import allocate_from_records
from container_allocator.reporting import summarize_containers

st.set_page_config(page_title="Container allocation", layout="wide")
st.title("Container allocation")
st.caption("Enter quantities per product, then compute the containers needed for the order.")

SAMPLE_CONTAINERS_PATH = "data/containers.sample.yaml"
SAMPLE_PRODUCTS_PATH = "data/products.sample.csv"

PRODUCT_COLUMNS = ["reference", "name", "unit_weight", "unit_volume", "refrigerated"]
TABLE_COLUMNS = PRODUCT_COLUMNS + ["quantity"]


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _empty_products_df() -> pd.DataFrame:
    return pd.DataFrame(columns=TABLE_COLUMNS)


def _products_to_table(df: pd.DataFrame) -> pd.DataFrame:
    items = normalize_line_items(df)
    return pd.DataFrame(
        [
            {
                "reference": item.reference,
                "name": item.name,
                "unit_weight": float(item.unit_weight),
                "unit_volume": float(item.unit_volume),
                "refrigerated": item.refrigerated,
                "quantity": item.quantity,
            }
            for item in items
        ],
        columns=TABLE_COLUMNS,
    )


def _load_products(content: str, filename: str) -> pd.DataFrame:
    if filename.lower().endswith(".json"):
        return _products_to_table(load_products_json(content))
    return _products_to_table(load_products_csv(content))


if "products_df" not in st.session_state:
    try:
        st.session_state["products_df"] = _load_products(_read_text(SAMPLE_PRODUCTS_PATH), SAMPLE_PRODUCTS_PATH)
    except (OSError, ShipmentInputError):
        st.session_state["products_df"] = _empty_products_df()
if "catalog_text" not in st.session_state:
    try:
        st.session_state["catalog_text"] = _read_text(SAMPLE_CONTAINERS_PATH)
    except OSError:
        st.session_state["catalog_text"] = ""

with st.sidebar:
    st.header("Settings")
    tie_break = st.selectbox(
        "Tie-break policy",
        options=list(TIE_BREAK_POLICIES),
        help="LEXICOGRAPHIC minimizes volume waste first, then weight waste. SUM_WASTE minimizes their sum.",
    )
    split_mode = st.selectbox(
        "Refrigerated handling",
        options=list(SPLIT_MODES),
        help="SPLIT allocates refrigerated and dry goods separately. ALL_REFRIGERATED ships the whole order refrigerated.",
    )
    volume_profile = st.text_input("Volume capacity profile", value="", placeholder="standard")

order_tab, maintenance_tab = st.tabs(["Order", "Data maintenance"])

with maintenance_tab:
    st.header("Data maintenance")
    st.subheader("Product list")
    products_file = st.file_uploader("Upload products (CSV or JSON)", type=["csv", "json"], key="products_upload")
    if st.button("Load uploaded products", use_container_width=True):
        if products_file is None:
            st.warning("Upload a product file first.")
        else:
            try:
                st.session_state["products_df"] = _load_products(
                    products_file.getvalue().decode("utf-8"), products_file.name
                )
                st.success("Product list loaded.")
            except EmptyDataError:
                st.error("The product file is empty.")
            except ShipmentInputError as exc:
                st.error(str(exc))
            except ValueError as exc:
                st.error(f"Could not read the product file: {exc}")

    st.subheader("Container catalog")
    catalog_file = st.file_uploader("Upload catalog (YAML or JSON)", type=["yaml", "yml", "json"], key="catalog_upload")
    # copy an upload into the text area once, so later edits to the text survive reruns
    if catalog_file is not None and st.session_state.get("catalog_file_id") != catalog_file.file_id:
        st.session_state["catalog_file_id"] = catalog_file.file_id
        st.session_state["catalog_text"] = catalog_file.getvalue().decode("utf-8")
    st.text_area("Catalog text", key="catalog_text", height=260)

try:
    config = load_config(
        st.session_state.get("catalog_text", ""),
        tie_break=tie_break,
        split_mode=split_mode,
        volume_profile=volume_profile.strip() or None,
    )
    container_records = load_container_records(st.session_state.get("catalog_text", ""))
except CatalogConfigError as exc:
    st.error(f"Container catalog could not be loaded: {exc}")
    st.stop()

if not container_records:
    st.warning("The container catalog is empty. Check the Data maintenance tab.")

with order_tab:
    st.header("Order")
    st.caption(f"Refrigerated container codes: {', '.join(sorted(config.refrigerated_codes)) or '(none)'}")
    edited_df = st.data_editor(
        st.session_state["products_df"],
        use_container_width=True,
        disabled=PRODUCT_COLUMNS,
        column_config={
            "unit_weight": st.column_config.NumberColumn("unit_weight", format="%.3f", help="kg per unit"),
            "unit_volume": st.column_config.NumberColumn("unit_volume", format="%.6f", help="m3 per unit"),
            "refrigerated": st.column_config.CheckboxColumn("refrigerated"),
            "quantity": st.column_config.NumberColumn("quantity", min_value=0, step=1),
        },
        key="order_table",
    )

    if st.button("Calculate", type="primary", use_container_width=True):
        try:
            quantities = dict(zip(edited_df["reference"].astype(str), edited_df["quantity"]))
            items = apply_quantities(normalize_line_items(st.session_state["products_df"]), quantities)
        except ShipmentInputError as exc:
            st.error(str(exc))
            st.stop()

        report = allocate_from_records(items, container_records, config)
        if report.is_empty:
            st.info(format_report_lines(report)[0])
            st.stop()

        result_df = build_allocation_rows(report)
        st.subheader("Allocation")
        st.dataframe(result_df, use_container_width=True)
        for _, row in result_df.iterrows():
            if row["error"]:
                st.warning(f"{row['label']}: {row['error']}")
        if report.absorbed_note:
            st.success(report.absorbed_note)

        summary = summarize_containers(report)
        if summary:
            summary_df = pd.DataFrame(summary.items(), columns=["type", "count"])
            st.subheader("Containers by type")
            st.dataframe(summary_df, use_container_width=True)

        st.subheader("Report")
        report_text = "\n".join(format_report_lines(report))
        st.code(report_text, language=None)
        st.download_button(
            "Download allocation CSV",
            data=result_df.to_csv(index=False).encode("utf-8-sig"),
            file_name="container_allocation.csv",
            use_container_width=True,
        )
