"""
JointGuard - Movement Risk Assessment
Main Streamlit Dashboard Application

Run with: streamlit run Streamlit_App/app.py
"""

import json
import streamlit as st
import numpy as np
import tempfile
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from Risk_Engine.core.actions import ActionCategory, ActionConfig, ActivityType, CameraAngle, ExperienceLevel
from Risk_Engine.core.frame_risk import RiskLevel
from Risk_Engine.detectors.pose_detector import PoseDetector
from Risk_Engine.pipeline.video_session import extract_landmark_frames, analyze_landmark_frames
from Streamlit_App.components.overlay_renderer import OverlayRenderer
from Streamlit_App.components.charts import create_risk_gauge, create_risk_timeline, create_issue_breakdown

MAX_KEY_MOMENT_PREVIEWS = 4
CANVAS_SIZE = (480, 360)

CATEGORY_LABELS = {
    ActionCategory.BASIC_POSTURE: "Basic posture",
    ActionCategory.ROUTINE: "Routine training",
    ActionCategory.PROFESSIONAL: "Professional sport",
}

# Page config
st.set_page_config(
    page_title="JointGuard - Movement Risk Assessment",
    page_icon="◉",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS - clean, minimal UI
st.markdown("""
<style>
    @import url('https://fonts.googleapis.com/css2?family=DM+Sans:wght@400;500;600;700&display=swap');

    .stApp { background: #f8fafc; }
    h1, h2, h3 { font-family: 'DM Sans', sans-serif !important; color: #0f172a !important; }

    .metric-card {
        background: #fff;
        border: 1px solid #e2e8f0;
        border-radius: 12px;
        padding: 20px;
        margin: 12px 0;
        box-shadow: 0 1px 3px rgba(0,0,0,0.05);
    }

    .metric-value { font-family: 'DM Sans', sans-serif; font-size: 2rem; font-weight: 600; }
    .status-low { color: #059669 !important; }
    .status-medium { color: #d97706 !important; }
    .status-high { color: #dc2626 !important; }

    [data-testid="stSidebar"] { background: #f1f5f9; }
</style>
""", unsafe_allow_html=True)


def metric_card(label: str, level: RiskLevel):
    st.markdown(f'<div class="metric-card"><div class="metric-value status-{level.value}">'
                f'{level.value.upper()}</div><small>{label}</small></div>', unsafe_allow_html=True)


def sidebar_config():
    """Activity picker grouped by category. Returns (ActionConfig, display name)."""
    with st.sidebar:
        st.markdown("## ⚙️ Settings")
        name = st.text_input("Your name", value="Climber")

        category = st.radio("Category", list(CATEGORY_LABELS), format_func=CATEGORY_LABELS.get)
        activities = ActivityType.by_category(category)
        activity = st.selectbox("Activity", activities, format_func=lambda a: a.label)
        angle = st.radio("Camera angle", list(CameraAngle), format_func=lambda a: a.value.title(),
                         horizontal=True)

        experience = None
        if category == ActionCategory.PROFESSIONAL:
            experience = st.selectbox("Experience level", list(ExperienceLevel),
                                      format_func=lambda e: e.value.title())
            st.caption("Experience level is recorded with the session; thresholds are not yet tuned per level.")

    return ActionConfig(activity_type=activity, angle=angle, experience_level=experience), name


def render_key_moments(result, poses):
    renderer = OverlayRenderer()
    moments = result.summary.key_moments[:MAX_KEY_MOMENT_PREVIEWS]
    if not moments:
        st.caption("No key moments - every frame stayed low risk.")
        return

    st.table([{
        'Time (s)': f"{r.timestamp:.2f}",
        'Risk': r.risk_level.value,
        'Score': r.risk_score,
        'Load': r.dominant_load.value,
        'Issues': ', '.join(i.replace('_', ' ') for i in r.issues),
    } for r in result.summary.key_moments])

    cols = st.columns(len(moments))
    for col, record in zip(cols, moments):
        canvas = np.full((CANVAS_SIZE[1], CANVAS_SIZE[0], 3), 245, dtype=np.uint8)
        img = renderer.render(canvas, poses[record.frame_index], record)
        with col:
            st.image(img[:, :, ::-1], caption=f"{record.timestamp:.2f}s", use_container_width=True)


def main():
    st.markdown("# JointGuard\n*Movement risk assessment from video*")
    config, name = sidebar_config()

    uploaded = st.file_uploader("Upload a video", type=["mp4", "mov", "avi", "webm"])
    if uploaded is None:
        st.info("📹 Upload a video of the selected activity to start the analysis")
        return

    if st.button("▶ Analyze", use_container_width=True):
        suffix = Path(uploaded.name).suffix
        with tempfile.NamedTemporaryFile(suffix=suffix) as tmp:
            tmp.write(uploaded.getbuffer())
            tmp.flush()

            progress = st.progress(0, text="Detecting poses...")
            with PoseDetector() as detector:
                poses = extract_landmark_frames(
                    tmp.name, detector,
                    progress_callback=lambda p: progress.progress(p, text=f"Detecting poses... {p}%")
                )
            progress.empty()

        st.session_state.poses = poses
        st.session_state.result = analyze_landmark_frames(poses, config, user_name=name)

    result = st.session_state.get('result')
    if result is None:
        return
    summary = result.summary

    col_summary, col_charts = st.columns([1, 1.2])
    with col_summary:
        st.markdown("### 🩺 Summary")
        c1, c2 = st.columns(2)
        with c1:
            metric_card("Overall risk", summary.overall_risk)
        with c2:
            if summary.secondary_risk is not None:
                metric_card("Ligament load (Q-angle)", summary.secondary_risk)
        st.caption(f"{summary.frame_count} frames analyzed as {summary.activity_type.label} - {summary.feedback}")
        st.markdown("### 💬 Feedback")
        st.markdown(result.message)

    with col_charts:
        st.markdown("### 📈 Analytics")
        st.plotly_chart(create_risk_gauge(summary, result.records), use_container_width=True)
        diagnostics = list(summary.diagnostic_stats)
        diagnostic = st.selectbox("Overlay diagnostic", [None] + diagnostics,
                                  format_func=lambda d: "None" if d is None else d.replace('_', ' '))
        st.plotly_chart(create_risk_timeline(result.records, diagnostic), use_container_width=True)
        if summary.issue_counts:
            st.plotly_chart(create_issue_breakdown(summary), use_container_width=True)

    st.markdown("### 🎯 Key moments")
    render_key_moments(result, st.session_state.poses)

    st.download_button("Download JSON report", data=json.dumps(result.to_dict(), indent=2),
                       file_name="session_report.json", mime="application/json")


if __name__ == "__main__":
    main()
