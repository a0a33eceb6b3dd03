# main.py
import json
import sys

from geonav.app.build import build


def run(config_path: str) -> int:
    with open(config_path, encoding="utf-8") as f:
        cfg = json.load(f)

    app = build(cfg)
    processed = app.run()

    p = app.session.progress
    print(
        json.dumps(
            {
                "processed": processed,
                "nodes": len(app.graph.graph),
                "edges": app.graph.graph.edge_count,
                "pois": sorted(app.graph.pois),
                "instruction_index": p.current_instruction_index,
                "arrived": p.arrived,
                "tracked_position": [p.tracked_position.x, p.tracked_position.z],
            }
        )
    )
    return 0 if p.arrived else 1


if __name__ == "__main__":
    sys.exit(run(sys.argv[1]))
