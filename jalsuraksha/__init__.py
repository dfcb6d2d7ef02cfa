"""
JalSuraksha: disease and water-quality surveillance store for primary health centers.
"""

from jalsuraksha.store import SurveillanceStore

__version__ = "1.0.0"

__all__ = ["SurveillanceStore", "__version__"]
