"""
Roadmap Stage Specifications

Two onset pathways (lower-limb and bulbar) that converge into a shared
advanced-care pathway. Each stage is a plain dict so it can be returned
from the API as-is.
"""

from typing import Any, Dict, List, Optional

PATHWAYS = ("lower-limb", "bulbar", "converged")
PATHWAY_FILTERS = ("all",) + PATHWAYS

CARE_LEVELS = ("self-sufficient", "assisted", "24/7 support")


def _resources(prefix: str, *items) -> List[Dict[str, str]]:
    return [
        {"id": f"{prefix}-r{i}", "title": title, "description": description, "category": category}
        for i, (title, description, category) in enumerate(items, start=1)
    ]


# Lower Limb Pathway - L1 to L4
LOWER_LIMB_STAGES: List[Dict[str, Any]] = [
    {
        "id": "L1",
        "code": "L1",
        "name": "Early Signs",
        "subtitle": "Foot drop, tripping, leg weakness",
        "description": "Initial lower limb symptoms appear. You may notice foot drop, tripping, or weakness in legs. This is the time to establish baseline assessments and begin building your support team.",
        "pathway": "lower-limb",
        "order": 1,
        "duration": "Usually 1-2 years",
        "severity": 1,
        "care_level": "self-sufficient",
        "common_symptoms": ["Foot drop", "Tripping", "Leg weakness", "Difficulty climbing stairs"],
        "next_stage_warnings": ["Increased mobility challenges", "Need for assistive devices"],
        "resources": _resources(
            "l1",
            ("Understanding Limb Onset", "Learn about lower limb onset MND", "support"),
            ("Early Physio Assessment", "Physiotherapy evaluation and exercises", "medical"),
            ("Fall Prevention", "Tips to reduce fall risk at home", "lifestyle"),
        ),
    },
    {
        "id": "L2",
        "code": "L2",
        "name": "Mobility Aids",
        "subtitle": "AFOs, walking sticks, walkers",
        "description": "Mobility support becomes helpful. Ankle-foot orthoses (AFOs) can help with foot drop, and walking aids provide stability and confidence.",
        "pathway": "lower-limb",
        "order": 2,
        "duration": "Usually 1-3 years",
        "severity": 2,
        "care_level": "self-sufficient",
        "common_symptoms": ["Reduced walking distance", "Need for support devices", "Fatigue with mobility"],
        "next_stage_warnings": ["Progression to home modifications", "Decreased independence"],
        "resources": _resources(
            "l2",
            ("OT Assessment", "Occupational therapy mobility assessment", "medical"),
            ("NDIS Funding", "Funding for mobility equipment", "support"),
            ("AFO Suppliers", "Local AFO providers and fitting", "equipment"),
        ),
    },
    {
        "id": "L3",
        "code": "L3",
        "name": "Home Modifications",
        "subtitle": "Rails, ramps, stairlifts",
        "description": "Home environment adaptations become important. Grab rails, ramps, and stairlifts help maintain independence and safety at home.",
        "pathway": "lower-limb",
        "order": 3,
        "duration": "Usually 1-2 years",
        "severity": 3,
        "care_level": "assisted",
        "common_symptoms": ["Inability to use stairs", "Limited bathroom access", "Need for accessibility"],
        "next_stage_warnings": ["Wheelchair transition becoming imminent", "May need care assistance"],
        "resources": _resources(
            "l3",
            ("Home Assessment", "OT home modification assessment", "medical"),
            ("Modification Grants", "Funding for home modifications", "support"),
            ("Stairlift Options", "Stairlift providers and installation", "equipment"),
        ),
    },
    {
        "id": "L4",
        "code": "L4",
        "name": "Wheelchair Transition",
        "subtitle": "Manual and powered options",
        "description": "Wheelchair use begins. Manual wheelchairs offer flexibility for short distances, while powered wheelchairs provide independence for longer use.",
        "pathway": "lower-limb",
        "order": 4,
        "duration": "Variable",
        "severity": 4,
        "care_level": "assisted",
        "common_symptoms": ["Unable to walk independently", "Dependent on mobility equipment", "May need transport assistance"],
        "next_stage_warnings": ["Progression to converged pathway", "Increasing care needs"],
        "resources": _resources(
            "l4",
            ("Wheelchair Assessment", "Seating and mobility assessment", "medical"),
            ("Powered Wheelchair Guide", "Choosing the right powered chair", "equipment"),
            ("Vehicle Modifications", "Wheelchair accessible vehicles", "equipment"),
        ),
    },
]

# Bulbar Pathway - B1 to B4
BULBAR_STAGES: List[Dict[str, Any]] = [
    {
        "id": "B1",
        "code": "B1",
        "name": "Early Signs",
        "subtitle": "Slurred speech, voice changes",
        "description": "Initial bulbar symptoms appear. Speech may become slurred and voice quality may change. Early intervention with speech therapy can help maintain communication.",
        "pathway": "bulbar",
        "order": 1,
        "duration": "Usually 1-2 years",
        "severity": 1,
        "care_level": "self-sufficient",
        "common_symptoms": ["Slurred speech", "Voice changes", "Mild swallowing difficulty"],
        "next_stage_warnings": ["Speech clarity will decline", "Consider voice banking"],
        "resources": _resources(
            "b1",
            ("Understanding Bulbar Onset", "Learn about bulbar onset MND", "support"),
            ("Speech Therapy", "Early speech and language therapy", "medical"),
            ("Voice Recording", "Recording your voice for future use", "support"),
        ),
    },
    {
        "id": "B2",
        "code": "B2",
        "name": "Speech Support",
        "subtitle": "Therapy, voice banking",
        "description": "Speech support becomes essential. Voice banking preserves your voice for future communication devices. Continue speech therapy to maintain clarity.",
        "pathway": "bulbar",
        "order": 2,
        "duration": "Usually 6-18 months",
        "severity": 2,
        "care_level": "self-sufficient",
        "common_symptoms": ["Significant speech clarity loss", "Difficulty being understood", "Slower speech rate"],
        "next_stage_warnings": ["AAC devices will soon be needed", "Communication changes ahead"],
        "resources": _resources(
            "b2",
            ("Voice Banking", "Create a synthetic voice from your recordings", "equipment"),
            ("Speech Exercises", "Exercises to maintain speech clarity", "medical"),
            ("Low-Tech AAC", "Simple communication boards and tools", "equipment"),
        ),
    },
    {
        "id": "B3",
        "code": "B3",
        "name": "AAC Devices",
        "subtitle": "Communication aids, eye-gaze",
        "description": "Augmentative and Alternative Communication (AAC) devices become primary communication method. Eye-gaze technology enables continued independence.",
        "pathway": "bulbar",
        "order": 3,
        "duration": "Variable",
        "severity": 3,
        "care_level": "assisted",
        "common_symptoms": ["Speech no longer understandable", "Dependent on AAC devices", "May need eye-tracking"],
        "next_stage_warnings": ["Swallowing difficulties emerging", "May progress to feeding tube stage"],
        "resources": _resources(
            "b3",
            ("AAC Assessment", "Assessment for communication devices", "medical"),
            ("Eye-Gaze Systems", "Eye-tracking communication technology", "equipment"),
            ("Device Funding", "NDIS funding for AAC devices", "support"),
        ),
    },
    {
        "id": "B4",
        "code": "B4",
        "name": "Swallowing Changes",
        "subtitle": "Modified diet, thickened fluids",
        "description": "Swallowing becomes more difficult. Modified food textures and thickened fluids help maintain safe eating. Dietitian support ensures adequate nutrition.",
        "pathway": "bulbar",
        "order": 4,
        "duration": "Usually 6-12 months",
        "severity": 4,
        "care_level": "assisted",
        "common_symptoms": ["Difficult swallowing", "Choking risk", "Reduced food intake"],
        "next_stage_warnings": ["PEG feeding tube may be needed", "Nutrition support essential"],
        "resources": _resources(
            "b4",
            ("Swallow Assessment", "Speech pathology swallowing assessment", "medical"),
            ("Modified Diet Guide", "Texture-modified food and fluids", "lifestyle"),
            ("Nutrition Support", "Dietitian support for MND", "medical"),
        ),
    },
]

# Converged Pathway - C1 to C4
CONVERGED_STAGES: List[Dict[str, Any]] = [
    {
        "id": "C1",
        "code": "C1",
        "name": "PEG / Feeding Tube",
        "subtitle": "Nutrition support decisions",
        "description": "Decisions about feeding tube placement. A PEG (Percutaneous Endoscopic Gastrostomy) can ensure adequate nutrition and hydration when swallowing becomes unsafe.",
        "pathway": "converged",
        "order": 5,
        "duration": "Long-term management",
        "severity": 4,
        "care_level": "assisted",
        "common_symptoms": ["Cannot eat safely", "Nutrition and hydration challenges", "May have PEG tube"],
        "next_stage_warnings": ["Respiratory support will likely be needed", "Care needs increasing"],
        "resources": _resources(
            "c1",
            ("PEG Information", "Understanding feeding tube options", "medical"),
            ("Decision Support", "Making informed choices about PEG", "support"),
            ("Living with PEG", "Day-to-day PEG management", "lifestyle"),
        ),
    },
    {
        "id": "C2",
        "code": "C2",
        "name": "Respiratory Support",
        "subtitle": "NIV, cough assist devices",
        "description": "Breathing support becomes necessary. Non-invasive ventilation (NIV) and cough assist devices help maintain respiratory function and comfort.",
        "pathway": "converged",
        "order": 6,
        "duration": "Long-term management",
        "severity": 4,
        "care_level": "24/7 support",
        "common_symptoms": ["Shortness of breath", "Weak cough", "Sleep apnea", "Breathing difficulties"],
        "next_stage_warnings": ["High level of care support needed", "Complex medical management"],
        "resources": _resources(
            "c2",
            ("NIV Introduction", "Understanding non-invasive ventilation", "medical"),
            ("Cough Assist", "Cough assist device information", "equipment"),
            ("Respiratory Clinic", "Specialist respiratory support", "medical"),
        ),
    },
    {
        "id": "C3",
        "code": "C3",
        "name": "Full-time Care",
        "subtitle": "Care packages, coordination",
        "description": "Around-the-clock care becomes essential. Care coordination ensures all your needs are met with a comprehensive support team.",
        "pathway": "converged",
        "order": 7,
        "duration": "Long-term",
        "severity": 5,
        "care_level": "24/7 support",
        "common_symptoms": ["Severe mobility loss", "Dependent on carers", "Complex medical needs", "Multiple equipment needs"],
        "next_stage_warnings": ["Palliative planning important", "Quality of life focus"],
        "resources": _resources(
            "c3",
            ("Care Package Planning", "Planning full-time care needs", "support"),
            ("Carer Support", "Support services for carers", "support"),
            ("Respite Options", "Respite care for families", "support"),
        ),
    },
    {
        "id": "C4",
        "code": "C4",
        "name": "Palliative Planning",
        "subtitle": "End-of-life preferences",
        "description": "Planning for comfort and dignity. Palliative care focuses on quality of life and ensuring your wishes are respected.",
        "pathway": "converged",
        "order": 8,
        "duration": "Variable",
        "severity": 5,
        "care_level": "24/7 support",
        "common_symptoms": ["Approaching end of life", "Focus on comfort and dignity", "Advanced care planning"],
        "next_stage_warnings": [],
        "resources": _resources(
            "c4",
            ("Advance Care Planning", "Documenting your care preferences", "support"),
            ("Palliative Care", "Specialist palliative care services", "medical"),
            ("Family Support", "Support for family and loved ones", "support"),
        ),
    },
]

ALL_STAGES: List[Dict[str, Any]] = LOWER_LIMB_STAGES + BULBAR_STAGES + CONVERGED_STAGES

STAGE_IDS = tuple(stage["id"] for stage in ALL_STAGES)


def get_stage_by_id(stage_id: str) -> Optional[Dict[str, Any]]:
    """Get a single stage by id."""
    for stage in ALL_STAGES:
        if stage["id"] == stage_id:
            return stage
    return None


def get_stages_by_pathway(pathway: str) -> List[Dict[str, Any]]:
    """
    Stages visible on a pathway. Both onset pathways continue into the
    converged stages.
    """
    if pathway == "all":
        return list(ALL_STAGES)
    if pathway == "lower-limb":
        return LOWER_LIMB_STAGES + CONVERGED_STAGES
    if pathway == "bulbar":
        return BULBAR_STAGES + CONVERGED_STAGES
    if pathway == "converged":
        return list(CONVERGED_STAGES)
    raise ValueError(f"Unknown pathway: {pathway!r}")


def get_stages_grouped_by_pathway(pathway_filter: str) -> Dict[str, List[Dict[str, Any]]]:
    if pathway_filter not in PATHWAY_FILTERS:
        raise ValueError(f"Unknown pathway: {pathway_filter!r}")
    return {
        "lower_limb": LOWER_LIMB_STAGES if pathway_filter in ("all", "lower-limb") else [],
        "bulbar": BULBAR_STAGES if pathway_filter in ("all", "bulbar") else [],
        "converged": CONVERGED_STAGES,
    }
