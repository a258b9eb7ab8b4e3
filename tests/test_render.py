import json
from pathlib import Path

import pytest

from protoscape import LayoutOptions, Session, SessionOptions
from protoscape.render import DEFAULT_STROKE, HIGHLIGHT_STROKE, render_frame

DATA_DIR = Path(__file__).resolve().parent / "data"


def _session():
    options = SessionOptions(layout=LayoutOptions(random_seed=0))
    return Session.from_files(DATA_DIR / "plants.csv", DATA_DIR / "plant_trait_groups.json", options)


def test_frame_has_one_sprite_per_node():
    session = _session()
    snap = session.settle(25)
    frame = render_frame(session, snap)

    assert [n.id for n in frame.nodes] == [n.id for n in session.nodes]
    for sprite in frame.nodes:
        x, y = snap[sprite.id]
        assert sprite.center == (x, y)
        assert sprite.top_left == (x - 50.0, y - 50.0)
        assert sprite.size == 80.0
    query = frame.nodes[-1]
    assert query.label == ""
    assert frame.nodes[0].label == "Quercus robur"
    assert frame.step == snap.step


def test_only_closest_query_edge_is_highlighted():
    session = _session()
    session.query.set_from_prototype("Rosa canina")
    session.apply_query()
    frame = render_frame(session)

    highlighted = [line for line in frame.links if line.highlight]
    assert len(highlighted) == 1
    assert highlighted[0].key == ("query", "Rosa canina")
    assert highlighted[0].stroke == HIGHLIGHT_STROKE
    assert frame.highlight == ("query", "Rosa canina")
    assert all(line.stroke == DEFAULT_STROKE for line in frame.links if not line.highlight)


def test_link_styles_and_tooltips():
    session = _session()
    frame = render_frame(session)

    query_links = [line for line in frame.links if line.is_query]
    static_links = [line for line in frame.links if not line.is_query]
    assert len(query_links) == 5
    assert len(static_links) == 10
    assert all(line.width == 5.0 and line.opacity == 1.0 for line in query_links)
    assert all(line.width == 1.0 and line.opacity == 0.2 for line in static_links)
    assert all(line.tooltip is None for line in static_links)
    first = query_links[0]
    assert first.tooltip == f"{first.weight:.3f}"


def test_link_endpoints_follow_positions():
    session = _session()
    snap = session.settle(5)
    frame = render_frame(session, snap)

    line = next(line for line in frame.links if line.key == ("query", "Poa annua"))
    assert line.start == snap["query"]
    assert line.end == snap["Poa annua"]
    assert line.midpoint == pytest.approx(
        ((snap["query"][0] + snap["Poa annua"][0]) / 2, (snap["query"][1] + snap["Poa annua"][1]) / 2)
    )


def test_frame_is_json_serializable():
    session = _session()
    data = render_frame(session).to_dict()

    decoded = json.loads(json.dumps(data))
    assert decoded["nodes"][-1]["kind"] == "query"
    assert decoded["highlight"][0] == "query"
