"""
Frame Appender - Stitch Fresh Rows onto Cached Frames.

Frames describe the same series when their schema keys match: same refId,
field count and name, and the same name, type and labels per field.
Matching frames have rows appended; anything else is a new series.
"""

from __future__ import annotations

import copy
from typing import Dict, List, Mapping, Optional, Sequence

from relative_range_cache.domain.entities import DataFrame, FrameField


def format_labels(labels: Optional[Mapping[str, str]]) -> str:
    """Format labels as ``{a="1", b="2"}`` with keys sorted."""
    if not labels:
        return ""
    pairs = ", ".join(f'{key}="{labels[key]}"' for key in sorted(labels))
    return "{" + pairs + "}"


def get_schema_key(frame: DataFrame) -> str:
    """Structural fingerprint of a frame used to decide merge targets."""
    key = f"{frame.ref_id}/{len(frame.fields)}/{frame.name}"
    for frame_field in frame.fields:
        key += f"|{frame_field.name}:{frame_field.type.value}"
        key += format_labels(frame_field.labels)
    return key


def _copy_columns(frame: DataFrame) -> List[List]:
    return [list(frame_field.values) for frame_field in frame.fields]


def _build_frame(template: DataFrame, columns: List[List]) -> DataFrame:
    fields = [
        FrameField(
            name=frame_field.name,
            type=frame_field.type,
            config=copy.deepcopy(frame_field.config),
            labels=dict(frame_field.labels) if frame_field.labels is not None else None,
            values=values,
        )
        for frame_field, values in zip(template.fields, columns)
    ]
    return DataFrame(
        name=template.name,
        ref_id=template.ref_id,
        fields=fields,
        meta=copy.deepcopy(template.meta),
    )


def append_matching_frames(
    prev: Sequence[DataFrame],
    new: Sequence[DataFrame],
) -> List[DataFrame]:
    """
    Append rows of ``new`` frames onto matching ``prev`` frames.

    Empty frames are dropped from both inputs. Neither input is mutated.

    Args:
        prev: Frames already shown (e.g. the cached start)
        new: Frames to merge in (e.g. the paginating response)

    Returns:
        Merged frame list: ``prev`` order first, then unmatched ``new`` frames
    """
    # Output slots hold either accumulated columns (mergeable) or a final frame
    templates: List[DataFrame] = []
    columns_by_slot: List[Optional[List[List]]] = []
    slot_by_key: Dict[str, int] = {}

    for frame in prev:
        if not frame.length:
            continue
        slot_by_key[get_schema_key(frame)] = len(templates)
        templates.append(frame)
        columns_by_slot.append(_copy_columns(frame))

    for frame in new:
        if not frame.length:
            continue
        slot = slot_by_key.get(get_schema_key(frame))
        if slot is None:
            templates.append(frame)
            columns_by_slot.append(None)
            continue
        for column, frame_field in zip(columns_by_slot[slot], frame.fields):
            column.extend(frame_field.values)

    merged: List[DataFrame] = []
    for template, columns in zip(templates, columns_by_slot):
        if columns is None:
            merged.append(template.model_copy(deep=True))
        else:
            merged.append(_build_frame(template, columns))
    return merged
