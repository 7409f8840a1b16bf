"""Pydantic models for API I/O and agent contracts.

The chatbot endpoints speak camelCase JSON (``hasStockKeywords``, ``reportType``),
so the models carry camelCase aliases while Python code uses snake_case names.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Intent = Literal["stock", "customer", "sales", "interaction", "medical", "general"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClassificationResult(CamelModel):
    category: Intent
    confidence: int = Field(ge=60, le=95)
    medications: List[str] = Field(default_factory=list)
    conditions: List[str] = Field(default_factory=list)
    has_stock_keywords: bool = False
    has_interaction_keywords: bool = False
    has_customer_keywords: bool = False
    has_sales_keywords: bool = False
    has_medical_keywords: bool = False
    has_general_keywords: bool = False
    tokens: List[str] = Field(default_factory=list)
    original_category: str


class ExternalLookupResult(CamelModel):
    source: str
    content: str
    medical_info: Dict[str, List[str]]
    timestamp: datetime


class AgentResult(BaseModel):
    agent: str
    intent: str
    response: str
    facts: Dict[str, Any] = Field(default_factory=dict)


class ChatRequest(BaseModel):
    message: Optional[str] = None
    context: str = "general"

class DrugInteractionRequest(BaseModel):
    medications: Optional[List[str]] = None

class InteractionPair(CamelModel):
    medication1: str
    medication2: str
    warning: str

class InteractionReport(CamelModel):
    medications: List[str]
    interactions: List[InteractionPair]
    warnings: List[str]
    has_interactions: bool
    severity: Literal["HIGH", "LOW"]


class ReportRequest(CamelModel):
    report_type: Optional[str] = None
    date_range: Optional[Dict[str, Any]] = None
