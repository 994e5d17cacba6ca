"""
Streamlit Frontend for Splitcalc

A minimal host page for the expense calculator: a few amount fields of
the household form, each with a button that opens the calculator keypad.

DESIGN PRINCIPLES:
1. Fields are read-only; amounts only change through the calculator
2. The live preview is shown under the expression
3. Errors appear inline and never close the keypad
4. Nothing is written until "OK"
"""

import streamlit as st

from splitcalc.binding import ExpenseTreeBinding
from splitcalc.calculator import key_from_button
from splitcalc.formatting import format_amount
from splitcalc.orchestrator import create_calculator_flow


# Page configuration
st.set_page_config(
    page_title="Family Expense Calculator",
    page_icon="🧮",
    layout="centered",
)

KEYPAD_ROWS = [
    ["7", "8", "9", "+", "C"],
    ["4", "5", "6", "-", "("],
    ["1", "2", "3", "*", ")"],
    [".", "0", "=", "/", "⌫"],
]

FIELDS = [
    ("My meal", "reimbursable.me.meal.0.amount"),
    ("My transport", "reimbursable.me.transport"),
    ("Wife's meal", "reimbursable.wife.meal.0.amount"),
    ("Brother's 3D printing", "reimbursable.brother.printer_3d"),
]


def get_flow():
    """Get or create the calculator flow for this browser session."""
    if "flow" not in st.session_state:
        st.session_state.binding = ExpenseTreeBinding()
        st.session_state.flow = create_calculator_flow(st.session_state.binding)
    return st.session_state.flow


def render_fields(flow) -> None:
    """Render the bound amount fields with their calculator buttons."""
    binding = st.session_state.binding
    for label, path in FIELDS:
        col_label, col_value, col_button = st.columns([3, 3, 1])
        col_label.markdown(f"**{label}**")
        col_value.text_input(
            label,
            value=format_amount(binding.read(path) or "0"),
            disabled=True,
            label_visibility="collapsed",
            key=f"field-{path}",
        )
        if col_button.button("🧮", key=f"open-{path}", disabled=flow.is_open):
            flow.open(path)
            st.rerun()


def render_calculator(flow) -> None:
    """Render the keypad for the open session."""
    state = flow.state
    st.markdown("---")
    st.caption(state.target_path)
    st.code(state.buffer or " ", language=None)

    preview = flow.preview()
    if preview is not None:
        st.markdown(f"= **{preview}**")
    if state.error is not None:
        st.error(state.error.message)

    for row in KEYPAD_ROWS:
        columns = st.columns(len(row))
        for column, label in zip(columns, row):
            if column.button(label, key=f"key-{label}", use_container_width=True):
                flow.press(key_from_button(label) or label)
                st.rerun()

    col_ok, col_cancel = st.columns(2)
    if col_ok.button("OK", type="primary", use_container_width=True):
        flow.confirm()
        st.rerun()
    if col_cancel.button("Cancel", use_container_width=True):
        flow.cancel()
        st.rerun()


def main():
    """Main application entry point."""
    st.title("🧮 Family Expense Calculator")
    flow = get_flow()

    render_fields(flow)
    if flow.is_open:
        render_calculator(flow)


if __name__ == "__main__":
    main()
