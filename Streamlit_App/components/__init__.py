"""Streamlit UI components."""
from .overlay_renderer import OverlayRenderer
from .charts import create_risk_gauge, create_risk_timeline, create_issue_breakdown
