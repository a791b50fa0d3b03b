"""
layout/simulator.py

Force-directed auto-layout:
1. Repulsion between every pair of entities (inverse-square)
2. Spring attraction along every relationship toward an ideal length
3. Weak gravity toward a fixed center point

The simulation always runs its full iteration budget; there is no
convergence check, so a given input and iteration count always produce the
same result.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from models import Relationship, Snapshot
from settings import LayoutSettings

# Entity id -> (width, height)
Sizes = Dict[str, Tuple[float, float]]

# Spreads coincident pairs apart along distinct directions
_GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


def _centers(snapshot: Snapshot, sizes: Optional[Sizes]) -> Dict[str, List[float]]:
    centers: Dict[str, List[float]] = {}
    for entity_id, (x, y) in snapshot.items():
        w, h = sizes.get(entity_id, (0.0, 0.0)) if sizes else (0.0, 0.0)
        centers[entity_id] = [x + w / 2, y + h / 2]
    return centers


def layout_step(snapshot: Snapshot, relationships: Iterable[Relationship],
                params: Optional[LayoutSettings] = None,
                sizes: Optional[Sizes] = None) -> Snapshot:
    """Advance the simulation by one iteration.

    All displacements are computed from the positions in *snapshot*, summed
    per entity, and applied together.

    Args:
        snapshot: Current top-left positions.
        relationships: Springs; self-loops and unknown ids are skipped.
        params: Force constants (defaults when None).
        sizes: Box sizes so forces act between centers; top-left corners are
            used for entities without a size.

    Returns:
        A new snapshot; *snapshot* is not modified.
    """
    p = params or LayoutSettings()
    centers = _centers(snapshot, sizes)
    ids = list(centers)
    disp = {entity_id: [0.0, 0.0] for entity_id in ids}

    # Repulsion (entity vs entity)
    pair = 0
    for i in range(len(ids)):
        a = ids[i]
        ax, ay = centers[a]
        for j in range(i + 1, len(ids)):
            b = ids[j]
            bx, by = centers[b]
            dx = ax - bx
            dy = ay - by
            dist_sq = dx * dx + dy * dy
            if dist_sq == 0:
                # Coincident centers: push apart along a fixed per-pair direction
                angle = pair * _GOLDEN_ANGLE
                dx, dy = math.cos(angle), math.sin(angle)
                dist_sq = 1.0
            dist = math.sqrt(dist_sq)
            push = p.repulsion / dist_sq * p.repulsion_step
            ux, uy = dx / dist, dy / dist
            disp[a][0] += ux * push
            disp[a][1] += uy * push
            disp[b][0] -= ux * push
            disp[b][1] -= uy * push
            pair += 1

    # Attraction (relationships)
    for rel in relationships:
        if rel.source == rel.target:
            continue
        s = centers.get(rel.source)
        t = centers.get(rel.target)
        if s is None or t is None:
            continue
        dx = s[0] - t[0]
        dy = s[1] - t[1]
        dist = math.sqrt(dx * dx + dy * dy) or 1.0
        pull = (dist - p.spring_length) * p.spring_strength
        ux, uy = dx / dist, dy / dist
        disp[rel.source][0] -= ux * pull
        disp[rel.source][1] -= uy * pull
        disp[rel.target][0] += ux * pull
        disp[rel.target][1] += uy * pull

    # Center gravity
    for entity_id in ids:
        cx, cy = centers[entity_id]
        disp[entity_id][0] += (p.center_x - cx) * p.gravity
        disp[entity_id][1] += (p.center_y - cy) * p.gravity

    return {
        entity_id: (x + disp[entity_id][0], y + disp[entity_id][1])
        for entity_id, (x, y) in snapshot.items()
    }


def iter_layout(snapshot: Snapshot, relationships: Iterable[Relationship],
                params: Optional[LayoutSettings] = None,
                sizes: Optional[Sizes] = None) -> Iterator[Snapshot]:
    """Yield the snapshot after each iteration, exactly ``params.iterations`` times.

    Lets a host spread the work over several frames; each step stays pure.
    """
    p = params or LayoutSettings()
    rels = list(relationships)
    current = dict(snapshot)
    for _ in range(max(0, p.iterations)):
        current = layout_step(current, rels, p, sizes)
        yield current


def run_layout(snapshot: Snapshot, relationships: Iterable[Relationship],
               params: Optional[LayoutSettings] = None,
               sizes: Optional[Sizes] = None) -> Snapshot:
    """Run the full iteration budget and return the final positions."""
    result = dict(snapshot)
    for result in iter_layout(snapshot, relationships, params, sizes):
        pass
    return result
