import json
import logging
from importlib import resources
from typing import Dict

from storage_distribution.documents import load_decision_matrix
from storage_distribution.interface import DecisionMatrix

logger = logging.getLogger(__name__)
common_profiles: Dict[str, DecisionMatrix] = {}


for profile in sorted(resources.files(__name__).iterdir(), key=lambda p: p.name):
    if not profile.name.endswith(".json"):
        continue
    profile_name = profile.name[: -len(".json")]
    logger.info("Loading decision matrix=%s from %s", profile_name, profile)
    common_profiles[profile_name] = load_decision_matrix(
        json.loads(profile.read_text(encoding="utf-8")), name=profile_name
    )
