"""Static drug-interaction and medical-condition reference tables.

Loaded once at import and shared read-only by the NLU layer and the agents.
Profiles are frozen dataclasses and the top-level tables are mapping proxies,
so nothing can mutate them at runtime.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple


@dataclass(frozen=True)
class InteractionProfile:
    interactions: FrozenSet[str]
    warnings: str
    contraindications: Tuple[str, ...]
    side_effects: Tuple[str, ...]
    dosage: str
    category: str
    pregnancy: str
    breastfeeding: str

    def interacts_with(self, other: str) -> bool:
        return other.lower() in self.interactions


@dataclass(frozen=True)
class ConditionProfile:
    symptoms: Tuple[str, ...]
    treatments: Tuple[str, ...]
    complications: Tuple[str, ...]
    prevention: Tuple[str, ...]


@dataclass(frozen=True)
class CombinationVerdict:
    level: str  # safe | not_recommended | dangerous
    headline: str
    details: Tuple[str, ...]


def _drug(interactions: Iterable[str], warnings: str, contraindications: Iterable[str],
          side_effects: Iterable[str], dosage: str, category: str,
          pregnancy: str, breastfeeding: str) -> InteractionProfile:
    return InteractionProfile(
        interactions=frozenset(i.lower() for i in interactions),
        warnings=warnings,
        contraindications=tuple(contraindications),
        side_effects=tuple(side_effects),
        dosage=dosage,
        category=category,
        pregnancy=pregnancy,
        breastfeeding=breastfeeding,
    )


_PARACETAMOL_BRAND = dict(
    warnings="May increase liver toxicity with alcohol",
    contraindications=["Liver disease", "Alcohol abuse", "Severe liver impairment"],
    side_effects=["Liver damage in high doses", "Allergic reactions", "Skin rash"],
    dosage="500-1000mg every 4-6 hours",
    category="Analgesic",
    pregnancy="Generally safe",
    breastfeeding="Generally safe",
)

_STATIN_COMMON = dict(
    warnings="May increase muscle damage risk",
    contraindications=["Liver disease", "Pregnancy", "Breastfeeding"],
    side_effects=["Muscle pain", "Liver problems", "Diabetes risk", "Memory problems"],
    category="Statin",
    pregnancy="Contraindicated",
    breastfeeding="Contraindicated",
)

_SSRI_COMMON = dict(
    interactions=["maois", "nsaids", "warfarin", "lithium"],
    warnings="May increase bleeding risk",
    contraindications=["MAOI use within 14 days", "Pregnancy (third trimester)"],
    side_effects=["Nausea", "Insomnia", "Sexual dysfunction", "Serotonin syndrome"],
    category="SSRI",
    pregnancy="Consult doctor",
    breastfeeding="Generally safe",
)

_DRUGS: Dict[str, InteractionProfile] = {
    # Pain medications
    "aspirin": _drug(
        ["warfarin", "ibuprofen", "naproxen", "clopidogrel", "heparin", "alcohol", "vitamin k"],
        "May increase bleeding risk when combined with blood thinners",
        ["Peptic ulcer", "Bleeding disorders", "Asthma", "Kidney disease"],
        ["Stomach upset", "Bleeding", "Ringing in ears", "Allergic reactions"],
        "325-650mg every 4-6 hours as needed", "NSAID", "Avoid in third trimester", "Generally safe",
    ),
    "ibuprofen": _drug(
        ["aspirin", "warfarin", "lithium", "methotrexate", "diuretics", "alcohol", "ace inhibitors"],
        "May increase risk of stomach bleeding and kidney problems",
        ["Kidney disease", "Heart failure", "Peptic ulcer", "Pregnancy (third trimester)"],
        ["Stomach upset", "Dizziness", "Rash", "Kidney problems"],
        "200-400mg every 4-6 hours", "NSAID", "Avoid in third trimester", "Generally safe",
    ),
    "paracetamol": _drug(
        ["alcohol", "warfarin", "isoniazid", "probenecid"],
        "High doses can cause liver damage, especially with alcohol",
        ["Liver disease", "Alcohol abuse", "Severe liver impairment"],
        ["Liver damage in high doses", "Allergic reactions", "Skin rash"],
        "500-1000mg every 4-6 hours", "Analgesic", "Generally safe", "Generally safe",
    ),
    "dolo": _drug(["alcohol", "warfarin", "other pain medications", "isoniazid"], **_PARACETAMOL_BRAND),
    "crocin": _drug(["alcohol", "warfarin", "other pain medications", "isoniazid"], **_PARACETAMOL_BRAND),
    "combiflam": _drug(
        ["alcohol", "warfarin", "other pain medications", "ace inhibitors"],
        "May increase stomach bleeding risk",
        ["Peptic ulcer", "Kidney disease", "Heart failure"],
        ["Stomach upset", "Dizziness", "Liver problems", "Kidney problems"],
        "As directed by doctor", "Combination Analgesic", "Consult doctor", "Consult doctor",
    ),

    # Blood thinners
    "warfarin": _drug(
        ["aspirin", "ibuprofen", "vitamin k", "amiodarone", "simvastatin", "alcohol", "cranberry juice"],
        "Many drug interactions possible - consult healthcare provider",
        ["Pregnancy", "Recent surgery", "Bleeding disorders", "Uncontrolled hypertension"],
        ["Bleeding", "Bruising", "Hair loss", "Skin necrosis"],
        "Dose varies based on INR levels", "Anticoagulant", "Contraindicated", "Generally safe",
    ),
    "heparin": _drug(
        ["aspirin", "ibuprofen", "other blood thinners", "nitroglycerin"],
        "May increase bleeding risk",
        ["Bleeding disorders", "Recent surgery", "Thrombocytopenia"],
        ["Bleeding", "Bruising", "Hair loss", "Osteoporosis"],
        "As prescribed by doctor", "Anticoagulant", "Generally safe", "Generally safe",
    ),

    # Antibiotics
    "amoxicillin": _drug(
        ["methotrexate", "oral contraceptives", "allopurinol", "probenecid"],
        "May reduce effectiveness of birth control",
        ["Penicillin allergy", "Mononucleosis", "Severe kidney disease"],
        ["Diarrhea", "Nausea", "Rash", "Yeast infection"],
        "250-500mg three times daily", "Antibiotic", "Generally safe", "Generally safe",
    ),
    "azithromycin": _drug(
        ["warfarin", "digoxin", "antacids", "cyclosporine"],
        "May increase drug levels",
        ["Liver disease", "Heart rhythm problems", "Myasthenia gravis"],
        ["Diarrhea", "Nausea", "Stomach upset", "QT prolongation"],
        "As prescribed by doctor", "Antibiotic", "Generally safe", "Generally safe",
    ),
    "ciprofloxacin": _drug(
        ["antacids", "iron supplements", "calcium supplements", "warfarin"],
        "May reduce absorption with antacids",
        ["Tendon problems", "Heart rhythm problems", "Pregnancy"],
        ["Tendon rupture", "Nausea", "Diarrhea", "Photosensitivity"],
        "As prescribed by doctor", "Antibiotic", "Avoid", "Consult doctor",
    ),

    # Diabetes medications
    "metformin": _drug(
        ["alcohol", "furosemide", "digoxin", "contrast dye"],
        "May cause lactic acidosis with alcohol",
        ["Kidney disease", "Heart failure", "Metabolic acidosis"],
        ["Nausea", "Diarrhea", "Lactic acidosis", "Vitamin B12 deficiency"],
        "As prescribed by doctor", "Antidiabetic", "Consult doctor", "Generally safe",
    ),
    "glimepiride": _drug(
        ["alcohol", "aspirin", "beta blockers", "corticosteroids"],
        "May cause hypoglycemia",
        ["Type 1 diabetes", "Diabetic ketoacidosis", "Severe kidney disease"],
        ["Hypoglycemia", "Weight gain", "Skin rash", "Liver problems"],
        "As prescribed by doctor", "Antidiabetic", "Avoid", "Avoid",
    ),

    # Blood pressure medications
    "amlodipine": _drug(
        ["simvastatin", "digoxin", "cyclosporine", "grapefruit juice"],
        "May increase drug levels",
        ["Severe aortic stenosis", "Cardiogenic shock"],
        ["Edema", "Dizziness", "Flushing", "Gingival hyperplasia"],
        "2.5-10mg daily", "Calcium Channel Blocker", "Generally safe", "Generally safe",
    ),
    "lisinopril": _drug(
        ["potassium supplements", "lithium", "nsaids", "diuretics"],
        "May increase potassium levels",
        ["Pregnancy", "Angioedema", "Bilateral renal artery stenosis"],
        ["Dry cough", "Dizziness", "Hyperkalemia", "Angioedema"],
        "As prescribed by doctor", "ACE Inhibitor", "Contraindicated", "Generally safe",
    ),

    # Cholesterol medications
    "atorvastatin": _drug(["grapefruit juice", "cyclosporine", "gemfibrozil", "niacin"],
                          dosage="10-80mg daily", **_STATIN_COMMON),
    "simvastatin": _drug(["grapefruit juice", "amiodarone", "verapamil", "diltiazem"],
                         dosage="5-80mg daily", **_STATIN_COMMON),

    # Mental health medications
    "sertraline": _drug(dosage="50-200mg daily", **_SSRI_COMMON),
    "fluoxetine": _drug(dosage="20-80mg daily", **_SSRI_COMMON),

    # Common substances
    "alcohol": _drug(
        ["aspirin", "ibuprofen", "warfarin", "metformin", "antidepressants"],
        "May increase side effects of many medications",
        ["Liver disease", "Pregnancy", "Certain medications"],
        ["Liver damage", "Increased bleeding", "Drowsiness", "Impaired judgment"],
        "Limit consumption", "Substance", "Avoid", "Limit",
    ),
    "grapefruit juice": _drug(
        ["statins", "amlodipine", "cyclosporine", "sildenafil"],
        "May increase drug levels significantly",
        ["With certain medications"],
        ["Increased drug effects", "Side effects"],
        "Avoid with certain medications", "Substance", "Generally safe", "Generally safe",
    ),
    "caffeine": _drug(
        ["albuterol", "theophylline", "ephedrine", "stimulants"],
        "May increase stimulant effects",
        ["Heart problems", "Anxiety disorders"],
        ["Insomnia", "Anxiety", "Heart palpitations", "Stomach upset"],
        "Limit consumption", "Stimulant", "Limit", "Limit",
    ),
}

_CONDITIONS: Dict[str, ConditionProfile] = {
    "diabetes": ConditionProfile(
        symptoms=("Increased thirst", "Frequent urination", "Fatigue", "Blurred vision", "Slow-healing wounds"),
        treatments=("Metformin", "Insulin", "Diet control", "Exercise"),
        complications=("Heart disease", "Kidney disease", "Eye problems", "Nerve damage"),
        prevention=("Healthy diet", "Regular exercise", "Weight management", "Regular checkups"),
    ),
    "hypertension": ConditionProfile(
        symptoms=("Headaches", "Shortness of breath", "Nosebleeds", "Chest pain", "Vision problems"),
        treatments=("ACE inhibitors", "Calcium channel blockers", "Diuretics", "Lifestyle changes"),
        complications=("Heart disease", "Stroke", "Kidney disease", "Eye problems"),
        prevention=("Low-salt diet", "Exercise", "Weight management", "Stress reduction"),
    ),
    "asthma": ConditionProfile(
        symptoms=("Wheezing", "Shortness of breath", "Chest tightness", "Coughing", "Difficulty breathing"),
        treatments=("Inhaled corticosteroids", "Bronchodilators", "Leukotriene modifiers", "Avoiding triggers"),
        complications=("Severe attacks", "Lung damage", "Sleep problems", "Exercise limitations"),
        prevention=("Avoiding triggers", "Regular medication", "Action plan", "Regular checkups"),
    ),
    "depression": ConditionProfile(
        symptoms=("Persistent sadness", "Loss of interest", "Fatigue", "Sleep problems", "Appetite changes"),
        treatments=("Antidepressants", "Psychotherapy", "Lifestyle changes", "Support groups"),
        complications=("Suicidal thoughts", "Substance abuse", "Relationship problems", "Work problems"),
        prevention=("Stress management", "Social support", "Regular exercise", "Healthy lifestyle"),
    ),
}

# Demo verdicts for a handful of pairs that are not in the interaction table.
_EXAMPLE_COMBINATIONS: Dict[FrozenSet[str], CombinationVerdict] = {
    frozenset({"montelukast", "salbutamol"}): CombinationVerdict(
        level="safe",
        headline="SAFE COMBINATION: Montelukast and Salbutamol can be used together safely.",
        details=(
            "Montelukast: Leukotriene receptor antagonist (oral tablet)",
            "Salbutamol: Short-acting beta agonist (inhaler)",
            "Interaction: No known harmful interactions",
            "Usage: Commonly prescribed together for asthma management",
            "Note: Both work through different mechanisms and complement each other",
        ),
    ),
    frozenset({"cetirizine", "loratadine"}): CombinationVerdict(
        level="not_recommended",
        headline="NOT RECOMMENDED: Cetirizine and Loratadine are both antihistamines.",
        details=(
            "Reason: Both are H1 antihistamines - taking together is unnecessary",
            "Risk: Increased side effects (drowsiness, dry mouth)",
            "Recommendation: Choose one antihistamine, not both",
            "Alternative: Use one antihistamine as prescribed",
        ),
    ),
    frozenset({"viagra", "cialis"}): CombinationVerdict(
        level="dangerous",
        headline="DANGEROUS COMBINATION: Viagra and Cialis should NOT be taken together.",
        details=(
            "Risk: Both are PDE5 inhibitors - can cause severe hypotension",
            "Side Effects: Dizziness, fainting, heart problems",
            "Warning: Can be life-threatening",
            "Recommendation: Use only one ED medication as prescribed",
        ),
    ),
}

DRUG_INTERACTIONS: Mapping[str, InteractionProfile] = MappingProxyType(_DRUGS)
MEDICAL_KNOWLEDGE: Mapping[str, ConditionProfile] = MappingProxyType(_CONDITIONS)
EXAMPLE_COMBINATIONS: Mapping[FrozenSet[str], CombinationVerdict] = MappingProxyType(_EXAMPLE_COMBINATIONS)


def get_drug(name: str) -> Optional[InteractionProfile]:
    return DRUG_INTERACTIONS.get(name.lower().strip())


def get_condition(name: str) -> Optional[ConditionProfile]:
    return MEDICAL_KNOWLEDGE.get(name.lower().strip())


def lookup_combination(first: str, second: str) -> Optional[CombinationVerdict]:
    return EXAMPLE_COMBINATIONS.get(frozenset({first.lower().strip(), second.lower().strip()}))
