"""Dashboard component tests: Plotly charts and the OpenCV overlay."""

import numpy as np
import plotly.graph_objects as go
import pytest

from conftest import build_pose
from Clinical_Research.risk_thresholds import RiskBands
from Risk_Engine.core.actions import ActivityType
from Risk_Engine.core.frame_risk import FrameRiskRecord, StandingDiagnostics
from Risk_Engine.core.landmarks import LANDMARKS, LandmarkSet
from Risk_Engine.core.session import summarize_analysis
from Streamlit_App.components.charts import create_issue_breakdown, create_risk_gauge, create_risk_timeline
from Streamlit_App.components.overlay_renderer import OverlayRenderer

BANDS = RiskBands(high=3, medium=2)


@pytest.fixture
def records():
    scores = [0, 2, 3, 0]
    return [
        FrameRiskRecord(i, i / 30, s, BANDS, ('head_lateral_shift',) if s else (),
                        StandingDiagnostics(head_lateral_offset=0.02 * s))
        for i, s in enumerate(scores)
    ]


class TestCharts:
    def test_gauge_shows_share_of_risky_frames(self, records):
        fig = create_risk_gauge(summarize_analysis(records), records)
        assert isinstance(fig, go.Figure)
        assert fig.data[0].value == pytest.approx(50.0)

    def test_gauge_without_frames(self):
        fig = create_risk_gauge(summarize_analysis([]), [])
        assert fig.data[0].value == 0.0

    def test_timeline_traces(self, records):
        fig = create_risk_timeline(records)
        names = [t.name for t in fig.data]
        assert names == ['Risk score', 'Medium', 'High']

    def test_timeline_with_diagnostic(self, records):
        fig = create_risk_timeline(records, 'head_lateral_offset')
        assert fig.data[-1].name == 'head lateral offset'
        assert list(fig.data[-1].y) == pytest.approx([0.0, 0.04, 0.06, 0.0])

    def test_issue_breakdown(self, records):
        summary = summarize_analysis(records, ActivityType.STANDING)
        fig = create_issue_breakdown(summary)
        assert list(fig.data[0].x) == [2]
        assert list(fig.data[0].y) == ['head lateral shift']


class TestOverlayRenderer:
    def test_render_draws_on_copy(self, records):
        canvas = np.zeros((240, 320, 3), dtype=np.uint8)
        out = OverlayRenderer().render(canvas, build_pose({'LEFT_KNEE': (0.40, 0.80)}), records[2])
        assert out.shape == canvas.shape
        assert out.any()
        assert not canvas.any()

    def test_missing_landmarks_do_not_raise(self, records):
        canvas = np.zeros((120, 160, 3), dtype=np.uint8)
        pose = LandmarkSet.from_points({LANDMARKS['NOSE']: build_pose()[LANDMARKS['NOSE']]})
        out = OverlayRenderer().render(canvas, pose, records[0])
        assert out.shape == canvas.shape

    def test_degenerate_leg_skips_reference(self):
        canvas = np.zeros((120, 160, 3), dtype=np.uint8)
        pose = build_pose({'LEFT_ANKLE': (0.45, 0.60)})
        out = OverlayRenderer(show_skeleton=False, show_issues=False).render(canvas, pose)
        assert out.shape == canvas.shape

    def test_all_layers_off(self, records):
        canvas = np.full((60, 80, 3), 7, dtype=np.uint8)
        renderer = OverlayRenderer(show_skeleton=False, show_reference=False, show_issues=False)
        assert np.array_equal(renderer.render(canvas, build_pose(), records[1]), canvas)
