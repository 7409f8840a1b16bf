"""Intent classification: bag-of-words naive Bayes plus a keyword priority cascade.

The naive Bayes model only supplies ``original_category``; the final label always
comes from ``PRIORITY_RULES``, an ordered decision table evaluated first-match-wins.
Interaction and greeting rules sit on top because words like "with" and "hi"
would otherwise trip the stock/medical/customer matchers.
"""
import re
from functools import lru_cache
from typing import Any, Callable, Dict, List, Tuple

from sklearn.feature_extraction.text import CountVectorizer
from sklearn.naive_bayes import MultinomialNB

from .entity_extractor import EntityExtractor, extract_candidate_pair
from ..schemas.io_models import ClassificationResult
from ..utils.logger import get_logger

logger = get_logger("nlu")

TRAINING_PHRASES: Dict[str, List[str]] = {
    "stock": [
        "stock information", "inventory status", "product quantity", "rack number",
        "shelf location", "most sold product", "top selling products", "popular products",
        "bestseller", "most sold", "top selling", "stock level", "inventory report",
        "low stock", "out of stock", "expiring", "expiry", "rack location", "shelf number",
        "location of", "where is", "find product", "product location", "item location",
        "rack information", "shelf information", "stock details", "inventory details",
        "product details", "item details", "quantity available", "available quantity",
        "stock count", "inventory count", "product count", "item count",
    ],
    "customer": [
        "customer information", "loyalty points", "customer list", "high loyalty customers",
        "most visited customer", "top customers", "frequent customers", "regular customers",
        "customer loyalty", "customer points", "loyalty program", "customer ranking",
        "best customers", "customer analysis",
    ],
    "sales": [
        "sales report", "revenue analysis", "today sales", "monthly sales", "profit report",
        "income analysis", "sales data", "revenue data", "profit data", "income data",
        "sales analysis", "revenue analysis", "profit analysis", "income analysis",
        "transaction history", "invoice history",
    ],
    "interaction": [
        "drug interaction", "medication compatibility", "side effects", "drug safety",
        "contraindications", "aspirin and warfarin", "check interactions",
        "medication interactions", "drug interactions", "between aspirin", "between warfarin",
        "between ibuprofen", "interactions between", "drug combination",
        "medication combination", "drug mixing", "medication mixing", "drug safety check",
        "medication safety", "drug compatibility", "medication compatibility",
        "interaction check", "safety check", "drug warning", "medication warning",
    ],
    "medical": [
        "symptoms", "symptom", "treatment", "treat", "dosage", "medicine information",
        "medical condition", "health information", "disease symptoms", "illness symptoms",
        "medical advice", "health advice", "disease treatment", "illness treatment",
        "medical dosage", "prescription dosage", "medicine dosage", "fever", "cough",
        "headache", "pain", "ache", "sore", "infection", "viral", "bacterial", "condition",
        "disease", "illness", "sick", "medicine", "medication", "drug", "pill", "tablet",
        "injection", "syrup", "diabetes", "hypertension", "asthma", "depression", "cancer",
        "heart disease", "kidney disease", "liver disease", "lung disease", "arthritis",
        "migraine", "allergy", "allergic", "rash", "itching", "swelling", "inflammation",
        "bleeding", "bruising", "dizziness", "nausea", "vomiting", "diarrhea",
        "constipation", "fatigue", "weakness", "tired", "exhausted", "insomnia", "sleep",
        "appetite", "weight", "blood pressure", "cholesterol", "sugar", "glucose",
        "insulin", "thyroid", "hormone", "vitamin", "mineral", "supplement",
    ],
    "general": [
        "help", "hello", "hi", "goodbye", "bye", "thank you", "thanks", "what can you do",
        "capabilities", "features", "how to use", "usage guide", "instructions", "guide",
        "tutorial",
    ],
}

Rule = Tuple[str, Callable[[Dict[str, Any]], bool], str]

PRIORITY_RULES: Tuple[Rule, ...] = (
    ("interaction_known", lambda c: c["has_interaction_keywords"] and len(c["medications"]) >= 2, "interaction"),
    ("interaction_free_text", lambda c: c["has_interaction_keywords"] and len(c["candidates"]) >= 2, "interaction"),
    ("interaction_unresolved", lambda c: c["has_interaction_keywords"], "general"),
    ("greeting", lambda c: c["has_general_keywords"], "general"),
    ("sales", lambda c: c["has_sales_keywords"], "sales"),
    ("stock", lambda c: c["has_stock_keywords"], "stock"),
    ("medical", lambda c: c["has_medical_keywords"] or len(c["conditions"]) > 0, "medical"),
    ("customer", lambda c: c["has_customer_keywords"], "customer"),
    ("default", lambda c: True, "general"),
)

CONFIDENCE_FLOOR = 60
CONFIDENCE_CEILING = 95
CONFIDENCE_WEIGHTS = {
    "has_stock_keywords": 25,
    "has_general_keywords": 30,
    "has_sales_keywords": 30,
    "has_interaction_keywords": 15,
    "has_customer_keywords": 15,
}
PER_MEDICATION_WEIGHT = 10


def tokenize(text: str) -> List[str]:
    return re.findall(r"[a-z0-9]+", text.lower())


def resolve_intent(context: Dict[str, Any]) -> Tuple[str, str]:
    """Walk the priority table and return (rule name, intent label) of the first match."""
    for name, predicate, label in PRIORITY_RULES:
        if predicate(context):
            return name, label
    return "default", "general"


def confidence_score(medication_count: int, flags: Dict[str, bool]) -> int:
    raw = medication_count * PER_MEDICATION_WEIGHT
    raw += sum(weight for flag, weight in CONFIDENCE_WEIGHTS.items() if flags.get(flag))
    return min(CONFIDENCE_CEILING, max(CONFIDENCE_FLOOR, raw))


class IntentModel:
    def __init__(self, extractor: EntityExtractor = None):
        self.extractor = extractor or EntityExtractor()
        self.vectorizer = CountVectorizer(lowercase=True)
        self.classifier = MultinomialNB()
        self._train()

    def _train(self):
        docs, labels = [], []
        for label, phrases in TRAINING_PHRASES.items():
            docs.extend(phrases)
            labels.extend([label] * len(phrases))
        self.classifier.fit(self.vectorizer.fit_transform(docs), labels)
        logger.info(f"[NLU] Intent model trained on {len(docs)} phrases")

    def predict(self, text: str) -> str:
        """Raw bag-of-words label, before any keyword override."""
        return str(self.classifier.predict(self.vectorizer.transform([text.lower()]))[0])

    def classify(self, text: str) -> ClassificationResult:
        entities = self.extractor.extract(text)
        raw_label = self.predict(text)

        context = dict(entities)
        needs_candidates = entities["has_interaction_keywords"] and len(entities["medications"]) < 2
        context["candidates"] = extract_candidate_pair(text) if needs_candidates else []

        rule, intent = resolve_intent(context)
        medications = list(entities["medications"])
        if rule == "interaction_free_text":
            medications.extend(context["candidates"])

        logger.debug(f"[NLU] rule={rule} intent={intent} raw={raw_label} meds={medications}")
        return ClassificationResult(
            category=intent,
            confidence=confidence_score(len(medications), entities),
            medications=medications,
            conditions=entities["conditions"],
            has_stock_keywords=entities["has_stock_keywords"],
            has_interaction_keywords=entities["has_interaction_keywords"],
            has_customer_keywords=entities["has_customer_keywords"],
            has_sales_keywords=entities["has_sales_keywords"],
            has_medical_keywords=entities["has_medical_keywords"],
            has_general_keywords=entities["has_general_keywords"],
            tokens=tokenize(text),
            original_category=raw_label,
        )


@lru_cache(maxsize=None)
def get_intent_model() -> IntentModel:
    return IntentModel()
