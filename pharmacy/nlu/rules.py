"""Keyword vocabularies and substring matching for the pharmacy assistant."""
from typing import Iterable, List

STOCK = ["stock", "inventory", "product", "item", "quantity", "rack", "shelf",
         "sold", "sale", "most sold", "top selling", "popular", "bestseller",
         "low stock", "out of stock", "expiring", "expiry", "rack location",
         "most sold product", "top selling product", "popular product",
         "stock level", "inventory status", "product quantity", "rack number",
         "shelf location", "stock information", "inventory report", "location of",
         "where is", "find product", "product location", "item location"]

INTERACTION = ["interaction", "between", "with", "combine", "together"]

CUSTOMER = ["customer", "client", "patient", "loyalty", "points", "visitor",
            "most visited", "top customer", "frequent", "regular", "customer list"]

SALES = ["sales", "revenue", "income", "profit", "transaction", "invoice",
         "sales report", "revenue report", "profit report", "sales data",
         "sales analysis", "revenue analysis", "profit analysis", "show me sales",
         "show sales", "sales information", "revenue information", "profit information",
         "today sales", "monthly sales", "daily sales", "sales summary",
         "revenue summary", "profit summary", "sales overview", "revenue overview",
         "profit overview", "sales details", "revenue details", "profit details",
         "sales history", "revenue history", "profit history", "sales records",
         "revenue records", "profit records", "sales statistics", "revenue statistics",
         "profit statistics", "sales figures", "revenue figures", "profit figures"]

MEDICAL = ["symptom", "symptoms", "condition", "disease", "illness", "sick",
           "fever", "cough", "headache", "pain", "ache", "sore", "infection",
           "viral", "bacterial", "treatment", "treat", "cure", "medicine",
           "medication", "drug", "pill", "tablet", "injection", "syrup",
           "diabetes", "hypertension", "asthma", "depression", "cancer",
           "heart disease", "kidney disease", "liver disease", "lung disease",
           "arthritis", "migraine", "allergy", "allergic", "rash", "itching",
           "swelling", "inflammation", "bleeding", "bruising", "dizziness",
           "nausea", "vomiting", "diarrhea", "constipation", "fatigue",
           "weakness", "tired", "exhausted", "insomnia", "sleep", "appetite",
           "weight", "blood pressure", "cholesterol", "sugar", "glucose",
           "insulin", "thyroid", "hormone", "vitamin", "mineral", "supplement"]

GENERAL = ["hi", "hello", "hey", "goodbye", "bye", "thank you", "thanks",
           "help", "what can you do", "capabilities", "features", "how to use",
           "usage guide", "instructions", "guide", "tutorial", "how are you",
           "good morning", "good afternoon", "good evening", "nice to meet you"]

# Sub-vocabularies the agents use to pick a response branch
LOCATION = ["location", "where", "rack", "shelf", "find", "locate"]
TOP_SELLING = ["most sold", "top selling", "popular", "bestseller"]
STOCK_ALERTS = ["low stock", "out of stock", "expiring"]
LOYALTY_BOARD = ["loyalty", "most visited"]

COMMON_CONDITIONS = ["fever", "cough", "headache", "diabetes", "asthma", "hypertension",
                     "depression", "cancer", "arthritis", "migraine", "allergy",
                     "infection", "viral", "bacterial"]

# Words ignored when guessing medication names from free text
INTERACTION_STOPWORDS = {"check", "interactions", "interaction", "between", "and", "with",
                         "drug", "drugs", "medicine", "medicines", "medication", "medications",
                         "take", "taking", "together", "combine", "safe", "what", "about",
                         "there", "they", "them", "does", "have", "will", "should", "could", "would"}


def _contains_any(q: str, vocab: Iterable[str]) -> bool:
    ql = q.lower()
    return any(phrase in ql for phrase in vocab)


def matched_keywords(q: str, vocab: Iterable[str]) -> List[str]:
    ql = q.lower()
    return [phrase for phrase in vocab if phrase in ql]


def has_stock_keywords(q: str) -> bool:
    return _contains_any(q, STOCK)

def has_interaction_keywords(q: str) -> bool:
    return _contains_any(q, INTERACTION)

def has_customer_keywords(q: str) -> bool:
    return _contains_any(q, CUSTOMER)

def has_sales_keywords(q: str) -> bool:
    return _contains_any(q, SALES)

def has_medical_keywords(q: str) -> bool:
    return _contains_any(q, MEDICAL)

def has_general_keywords(q: str) -> bool:
    return _contains_any(q, GENERAL)
