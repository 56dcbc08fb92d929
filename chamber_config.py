# chamber_config.py

import logging
from typing import Dict

import pandas as pd

from chamber_constants import N_CHAMBER_POINTS, N_WIRES
from wire import ChamberDescription, WireCalibration

logger = logging.getLogger(__name__)

CONFIG_COLUMNS = ["chamber_id", "plane", "group", "wire", "offset", "speed"]

# optional chamber placement, repeated on every wire row
POINT_COLUMNS = [f"p{i}_{axis}" for i in range(N_CHAMBER_POINTS) for axis in "xyz"]


def load_chamber_config(path: str, sep: str = ",") -> Dict[int, ChamberDescription]:
    """
    Read chamber calibrations from a CSV/TSV table.

    One row per wire with columns chamber_id, plane, group, wire, offset,
    speed; lines starting with '#' are ignored. Every chamber must list
    each of its four wires exactly once. Columns p0_x .. p2_z, when
    present, give the chamber reference points.

    Returns
    -------
    dict
        chamber_id -> ChamberDescription
    """
    df = pd.read_csv(path, sep=sep, comment="#", skipinitialspace=True)
    df.columns = [c.strip() for c in df.columns]
    missing = [c for c in CONFIG_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path}: missing columns {missing}")
    has_points = all(c in df.columns for c in POINT_COLUMNS)

    config: Dict[int, ChamberDescription] = {}
    for chamber_id, rows in df.groupby("chamber_id", sort=True):
        wires = sorted(int(w) for w in rows["wire"])
        if wires != list(range(N_WIRES)):
            raise ValueError(
                f"{path}: chamber {chamber_id} must list wires 0..{N_WIRES - 1} once, got {wires}"
            )
        rows = rows.sort_values("wire")
        parameters = [
            WireCalibration(int(r.offset), float(r.speed))
            for r in rows.itertuples()
        ]
        first = rows.iloc[0]
        placement = {}
        if has_points:
            coords = [float(first[c]) for c in POINT_COLUMNS]
            placement["points"] = [coords[i:i + 3] for i in range(0, len(coords), 3)]
        config[int(chamber_id)] = ChamberDescription(
            parameters, plane=int(first["plane"]), group=int(first["group"]), **placement
        )

    logger.info("loaded calibration for %d chambers from %s", len(config), path)
    return config


def save_chamber_config(config: Dict[int, ChamberDescription], path: str, sep: str = ",") -> None:
    rows = []
    for chamber_id, chamber in sorted(config.items()):
        for wire, params in enumerate(chamber.parameters):
            rows.append({
                "chamber_id": chamber_id,
                "plane": chamber.plane,
                "group": chamber.group,
                "wire": wire,
                "offset": params.offset,
                "speed": params.speed,
                **{
                    f"p{i}_{axis}": chamber.points[i][j]
                    for i in range(N_CHAMBER_POINTS) for j, axis in enumerate("xyz")
                },
            })
    pd.DataFrame(rows, columns=CONFIG_COLUMNS + POINT_COLUMNS).to_csv(path, sep=sep, index=False)
