"""
Generate a synthetic source/target curve pair with a known rigid offset.

- The source is a wavy, asymmetric stroke sampled at irregular spacing to mimic
  pointer input (dense where the stroke is slow, sparse where it is fast).
- The target is the source rotated about its centroid and translated.
- Writes data/synthetic/source.tsv and data/synthetic/target.tsv in the
  tab-separated point list format.

The applied rotation/translation are printed so that the ICP result of
run_alignment.py can be compared against them.
"""
from __future__ import annotations

import argparse
import math
import sys
from pathlib import Path

import numpy as np

sys.path.append(str(Path(__file__).parent.parent / "src"))

from curve_alignment.utils.geometry import rotate_points, translate_points
from curve_alignment.utils.point_io import write_points_file


def make_stroke(n=120, length=300.0, seed=7):
    rng = np.random.default_rng(seed)
    # Irregular parameter steps imitate varying drawing speed
    steps = rng.uniform(0.3, 1.7, size=n)
    s = np.concatenate([[0.0], np.cumsum(steps)])
    s = s / s[-1] * length
    x = 100.0 + s
    y = 200.0 + 40.0 * np.sin(s / 45.0) + 0.002 * (s - length / 3) ** 2
    return np.column_stack([x, y])


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic curve pair for ICP")
    parser.add_argument("--out-dir", type=str, default="data/synthetic", help="Output directory")
    parser.add_argument("--rotation-deg", type=float, default=6.0, help="Rotation applied to the target (degrees)")
    parser.add_argument("--dx", type=float, default=12.0, help="Translation applied to the target (x)")
    parser.add_argument("--dy", type=float, default=-8.0, help="Translation applied to the target (y)")
    parser.add_argument("--seed", type=int, default=7, help="Seed for the irregular stroke spacing")
    args = parser.parse_args()

    source = make_stroke(seed=args.seed)
    target = translate_points(rotate_points(source, math.radians(args.rotation_deg)), (args.dx, args.dy))

    out_dir = Path(args.out_dir)
    src_path = write_points_file(out_dir / "source.tsv", source)
    tgt_path = write_points_file(out_dir / "target.tsv", target)

    print(f"Wrote: {src_path} ({len(source)} points)")
    print(f"Wrote: {tgt_path} ({len(target)} points)")
    print(f"Applied rotation {args.rotation_deg:.3f} deg about the source centroid, translation ({args.dx}, {args.dy})")


if __name__ == "__main__":
    main()
