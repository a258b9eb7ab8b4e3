"""Example pipeline: lay out a few plants and move the query point around."""

from protoscape import InteractionAdapter, LayoutOptions, Session, SessionOptions, render_frame

ROWS = [
    {"scientific_name": "Quercus robur", "common_name": "Pedunculate oak", "image": "", "cluster": 0,
     "max_height": 1.0, "is_woody": "true", "leaf_shape-ovate": 1, "leaf_shape-linear": 0},
    {"scientific_name": "Pinus sylvestris", "common_name": "Scots pine", "image": "", "cluster": 1,
     "max_height": 0.9, "is_woody": "true", "leaf_shape-ovate": 0, "leaf_shape-linear": 1},
    {"scientific_name": "Bellis perennis", "common_name": "Common daisy", "image": "", "cluster": 2,
     "max_height": 0.05, "is_woody": "false", "leaf_shape-ovate": 1, "leaf_shape-linear": 0},
    {"scientific_name": "Poa annua", "common_name": "Annual meadow grass", "image": "", "cluster": 3,
     "max_height": 0.1, "is_woody": "false", "leaf_shape-ovate": 0, "leaf_shape-linear": 1},
]

GROUPS = {"max_height": "growth_form", "is_woody": "growth_form", "leaf_shape-ovate": "leaves", "leaf_shape-linear": "leaves"}


def _report(session: Session) -> None:
    snapshot = session.settle()
    closest = session.closest_query_edge()
    print(f"Settled after {snapshot.step} steps; closest: {closest.target} ({closest.weight:.3f})")
    for node_id, (x, y) in snapshot.positions.items():
        print(f"  {node_id:<18} ({x:7.1f}, {y:7.1f})")


def main() -> None:
    session = Session.from_rows(ROWS, GROUPS, SessionOptions(layout=LayoutOptions(random_seed=1)))
    adapter = InteractionAdapter(session)
    for group in adapter.controls:
        print(group.title, [control.caption for control in group.controls])

    print("Query at the mean vector:")
    _report(session)

    adapter.slider_input(0, 0.95)
    adapter.checkbox_change(3)
    adapter.apply()
    print("Tall plant with linear leaves:")
    _report(session)

    frame = render_frame(session)
    print(f"Highlighted link: {frame.highlight}")


if __name__ == "__main__":
    main()
