"""
Checks that the installed Streamlit supports the widget options the app uses.
"""

import inspect

import pytest
import streamlit as st


@pytest.mark.parametrize(
    "widget",
    [st.image, st.button, st.download_button, st.form_submit_button],
)
def test_widgets_accept_container_width(widget):
    assert "use_container_width" in inspect.signature(widget).parameters


def test_rerun_is_available():
    assert callable(st.rerun)
