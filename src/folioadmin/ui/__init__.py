"""Streamlit admin panel for folioadmin."""
