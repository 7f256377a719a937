"""Facts and answers store."""

from posture.assessment.facts.store import FactsStore, StoreSnapshot, infer_category

__all__ = ["FactsStore", "StoreSnapshot", "infer_category"]
