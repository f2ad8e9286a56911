import logging

import matplotlib.pyplot as plt
import streamlit as st

from nkmap import (
    build_map,
    find_groups,
    generate_expression,
    get_variables,
    groups_to_sympy,
    minterms_to_truth_table,
    reference_expression,
    truth_table_of,
)
from nkmap.plotting import draw_map

# Discovery and reduction grow combinatorially past this
MAX_INPUT_BITS = 6

# Checkbox columns per row in truth-table mode
TABLE_COLUMNS = 8

logging.basicConfig(level=logging.INFO)

# ------------------------------- Page setup -------------------------------

st.set_page_config(page_title="N-Variable K-Map Simplifier", layout="wide")
st.title("🧮 N-Variable K-Map Simplifier")
st.markdown("---")

mode = st.radio("Input mode:", ["Minterms", "Truth table"])
n = int(st.number_input("Number of variables:", min_value=0, max_value=MAX_INPUT_BITS, value=4, step=1))

if mode == "Minterms":
    raw_mins = st.text_input("Minterms (e.g. 1,3,5,7):")
else:
    st.caption("Row k is true when checked; bit 0 of k is A, bit 1 is B, and so on.")
    columns = st.columns(min(2**n, TABLE_COLUMNS))
    rows = [
        columns[i % len(columns)].checkbox(str(i), key=f"row-{n}-{i}")
        for i in range(2**n)
    ]

# ------------------------------- On submit -------------------------------
if st.button("Simplify 🚀"):
    try:
        if mode == "Minterms":
            mins = [int(x.strip()) for x in raw_mins.split(",") if x.strip()]
            truth_table = minterms_to_truth_table(mins, n)
        else:
            truth_table = rows
            mins = [i for i, value in enumerate(truth_table) if value]

        groups = find_groups(truth_table)
        sop_text = generate_expression(groups, n)
        _, reference_text = reference_expression(truth_table, prime="′")
        matches = truth_table_of(groups_to_sympy(groups, n), get_variables(n)) == list(truth_table)

        st.success(f"**SOP:**  \nF = {sop_text}")
        st.info(f"**SymPy SOPform:**  \nF = {reference_text}")
        if matches:
            st.caption("✅ SymPy evaluation of the SOP reproduces the truth table.")
        else:
            st.warning("SymPy evaluation of the SOP differs from the truth table.")

        steps = (
            f"• variables: {n}\n"
            f"• minterms = {mins}\n"
            f"• groups kept: {len(groups)}\n"
            f"• result (SOP): F = {sop_text}"
        )
        st.text_area("Details:", steps, height=150)

        with st.container():
            st.markdown("### 🗺️ Karnaugh map")
            st.caption("Axes beyond the second are shown as separate slices.")
            fig = draw_map(build_map(truth_table), groups)
            st.pyplot(fig)
            plt.close(fig)

    except Exception as e:
        st.error(f"Could not simplify:\n{e}")
