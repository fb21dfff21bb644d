"""
Tabular views of engine output.

Flattens comments, permits and checklist items into pandas DataFrames for
printing, export and quick aggregation.
"""

from typing import Sequence

import pandas as pd

from siteplan.checklist import ActionItem, ActionStatus
from siteplan.models import Comment, PermitRequirement, Severity

COMMENT_COLUMNS = ["id", "structure_id", "category", "severity", "title", "message", "citation", "suggested_action"]
PERMIT_COLUMNS = ["permit_type", "authority", "required", "estimated_fee_range", "timeline_estimate", "triggered_by"]
CHECKLIST_COLUMNS = ["id", "category", "action_name", "status", "confidence", "summary", "evidence"]


def comments_frame(comments: Sequence[Comment]) -> pd.DataFrame:
    """One row per comment, most severe first; order is stable within a severity."""
    if not comments:
        return pd.DataFrame(columns=COMMENT_COLUMNS)
    df = pd.DataFrame([c.to_dict() for c in comments])[COMMENT_COLUMNS]
    df["rank"] = df["severity"].apply(lambda s: Severity(s).rank)
    df = df.sort_values("rank", ascending=False, kind="stable").drop(columns="rank")
    return df.reset_index(drop=True)


def permits_frame(permits: Sequence[PermitRequirement]) -> pd.DataFrame:
    if not permits:
        return pd.DataFrame(columns=PERMIT_COLUMNS)
    return pd.DataFrame([p.to_dict() for p in permits])[PERMIT_COLUMNS]


def _evidence(item: ActionItem) -> str:
    if item.status == ActionStatus.RESTRICTED:
        return "; ".join(item.blocking_factors)
    if item.status == ActionStatus.UNKNOWN:
        return "; ".join(item.data_gaps)
    return "; ".join(item.conditions or item.next_steps)


def checklist_frame(items: Sequence[ActionItem]) -> pd.DataFrame:
    """One row per action, with the evidence that justifies its status."""
    rows = []
    for item in items:
        rows.append({
            "id": item.id,
            "category": item.category.label,
            "action_name": item.action_name,
            "status": item.status.value,
            "confidence": item.confidence.value,
            "summary": item.summary,
            "evidence": _evidence(item),
        })
    if not rows:
        return pd.DataFrame(columns=CHECKLIST_COLUMNS)
    return pd.DataFrame(rows)[CHECKLIST_COLUMNS]


def status_counts(items: Sequence[ActionItem]) -> pd.Series:
    """Number of actions per status, every status present."""
    statuses = pd.Series([item.status.value for item in items], dtype="object")
    return statuses.value_counts().reindex([s.value for s in ActionStatus], fill_value=0)
