"""
Health check page for the Streamlit admin panel.
"""

from folioadmin.health import render_health_page

if __name__ == "__main__":
    render_health_page()
