"""
Lot constraint engine.
Placement feedback, permit derivation and the action checklist.
"""

from siteplan.geometry import Rect
from siteplan.models import (
    CandidateStructure,
    Comment,
    CommentCategory,
    Easement,
    EasementEdge,
    EasementType,
    FeatureKind,
    PermitRequirement,
    Severity,
    SiteFeature,
    SiteModel,
    StructureType,
)
from siteplan.settings import EvaluatorSettings, ChecklistSettings, Setbacks, load_settings, save_settings
from siteplan.constraints import ConstraintEvaluator, evaluate, evaluate_all, dedupe_comments
from siteplan.permits import PermitDeriver, derive_permits
from siteplan.facts import PropertyFacts, RuleCheck, CheckStatus, EnvironmentalFlag, FlagType
from siteplan.checklist import (
    ActionChecklistResolver,
    ActionItem,
    ActionStatus,
    ActionCategory,
    Confidence,
    classify,
    group_by_category,
)
from siteplan.summaries import utility_summary, septic_summary, SepticSummary

__all__ = [
    # Site model
    "Rect",
    "SiteFeature",
    "FeatureKind",
    "Easement",
    "EasementType",
    "EasementEdge",
    "SiteModel",
    "CandidateStructure",
    "StructureType",
    # Evaluator
    "Comment",
    "CommentCategory",
    "Severity",
    "ConstraintEvaluator",
    "evaluate",
    "evaluate_all",
    "dedupe_comments",
    # Permits
    "PermitRequirement",
    "PermitDeriver",
    "derive_permits",
    # Checklist
    "PropertyFacts",
    "RuleCheck",
    "CheckStatus",
    "EnvironmentalFlag",
    "FlagType",
    "ActionChecklistResolver",
    "ActionItem",
    "ActionStatus",
    "ActionCategory",
    "Confidence",
    "classify",
    "group_by_category",
    # Settings and summaries
    "EvaluatorSettings",
    "ChecklistSettings",
    "Setbacks",
    "load_settings",
    "save_settings",
    "utility_summary",
    "septic_summary",
    "SepticSummary",
]
