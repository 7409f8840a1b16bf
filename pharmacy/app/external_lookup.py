#!/usr/bin/env python3
"""
External lookup module for the pharmacy assistant.

Best-effort fallback for substances and conditions missing from the local
knowledge base: query public medical-reference search pages, flatten the markup
into sentences and bucket them by topic. Sources are fetched concurrently, each
with its own timeout; a failing source is logged and skipped.
"""

import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from .config import Config
from ..schemas.io_models import ExternalLookupResult
from ..utils.logger import get_logger

logger = get_logger("lookup")

SOURCES: Tuple[Tuple[str, str], ...] = (
    ("drugs.com", "https://www.drugs.com/search.php?searchterm={term}"),
    ("webmd", "https://www.webmd.com/search/search_results/default.aspx?query={term}"),
    ("mayoclinic", "https://www.mayoclinic.org/search/search-results?q={term}"),
    ("rxlist", "https://www.rxlist.com/search/{term}"),
    ("medicinenet", "https://www.medicinenet.com/search/{term}"),
    ("fda", "https://www.fda.gov/search?search_api_fulltext={term}"),
    ("pubmed", "https://www.ncbi.nlm.nih.gov/pubmed/?term={term}"),
    ("who", "https://www.who.int/search?q={term}"),
    ("medlineplus", "https://www.medlineplus.gov/search/search_results.do?query={term}"),
    ("healthline", "https://www.healthline.com/search?q={term}"),
)

HEADERS = {
    "User-Agent": ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                   "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

MIN_SENTENCE_LENGTH = 20
MAX_SENTENCE_LENGTH = 400
MAX_CONTENT_SENTENCES = 10

BOILERPLATE = (".com", "Close", "Search", "Sign in", "Register", "Cookie", "Privacy",
               "Terms", "Menu", "Navigation", "Skip to", "Accessibility", "Contact",
               "About", "Help", "Feedback", "Sitemap")

BUCKET_PATTERNS: Dict[str, List[re.Pattern]] = {
    bucket: [re.compile(p, re.IGNORECASE) for p in patterns]
    for bucket, patterns in {
        "interactions": [r"interact.*with", r"drug.*interaction", r"may.*interact", r"avoid.*with",
                         r"should.*not.*take", r"contraindicated.*with", r"increases.*risk",
                         r"decreases.*effectiveness", r"combine.*with", r"take.*together"],
        "side_effects": [r"side.*effect", r"adverse.*effect", r"may.*cause",
                         r"common.*side.*effect", r"unwanted.*effect", r"reaction"],
        "dosage": [r"dosage", r"dose", r"mg.*daily", r"milligram", r"take.*times", r"prescribed.*dose"],
        "warnings": [r"warning", r"caution", r"precaution", r"danger", r"risk", r"be.*careful"],
        "contraindications": [r"contraindication", r"should.*not.*use", r"avoid.*if",
                              r"not.*recommended", r"do.*not.*take"],
        "pregnancy": [r"pregnancy", r"pregnant", r"breastfeeding", r"lactation", r"nursing"],
    }.items()
}


def clean_sentence(sentence: str) -> str:
    cleaned = re.sub(r"[^\w\s.,!?-]", "", sentence)
    return re.sub(r"\s+", " ", cleaned).strip()


def is_usable(sentence: str) -> bool:
    if not MIN_SENTENCE_LENGTH < len(sentence) < MAX_SENTENCE_LENGTH:
        return False
    return not any(marker in sentence for marker in BOILERPLATE)


def html_to_sentences(html: str) -> List[str]:
    """Flatten page markup into cleaned, filtered plain-text sentences."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    root = soup.body or soup
    text = root.get_text(" ")
    sentences = []
    for raw in re.split(r"[.!?]+", text):
        cleaned = clean_sentence(raw)
        if is_usable(cleaned) and cleaned not in sentences:
            sentences.append(cleaned)
    return sentences


def bucket_sentences(sentences: List[str]) -> Dict[str, List[str]]:
    """Assign each sentence to every bucket whose patterns match it."""
    buckets: Dict[str, List[str]] = {name: [] for name in BUCKET_PATTERNS}
    for sentence in sentences:
        for name, patterns in BUCKET_PATTERNS.items():
            if any(p.search(sentence) for p in patterns):
                buckets[name].append(sentence)
    return buckets


def collect(results: List[ExternalLookupResult], bucket: str, limit: int) -> List[str]:
    """Flatten one bucket across all sources, keeping source order."""
    out: List[str] = []
    for result in results:
        for sentence in result.medical_info.get(bucket, []):
            if sentence not in out:
                out.append(sentence)
            if len(out) >= limit:
                return out
    return out


def results_to_text(results: List[ExternalLookupResult]) -> str:
    return "\n\n".join(f"[{r.source}] {r.content}" for r in results if r.content)


class ExternalLookupClient:
    """Scrapes the configured sources for a search term."""

    def __init__(self, sources=SOURCES, timeout: Optional[float] = None,
                 max_workers: Optional[int] = None, enabled: Optional[bool] = None,
                 session: Optional[requests.Session] = None):
        self.sources = tuple(sources)
        self.timeout = timeout or Config.EXTERNAL_LOOKUP_TIMEOUT
        self.max_workers = max_workers or Config.EXTERNAL_LOOKUP_MAX_WORKERS
        self.enabled = Config.EXTERNAL_LOOKUP_ENABLED if enabled is None else enabled
        self.http = session or requests

    def search(self, term: str) -> List[ExternalLookupResult]:
        term = (term or "").strip()
        if not self.enabled or not term or not self.sources:
            return []

        logger.info(f"[LOOKUP] Searching {len(self.sources)} sources for '{term}'")
        results: Dict[str, ExternalLookupResult] = {}
        workers = max(1, min(self.max_workers, len(self.sources)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self._fetch, name, template.format(term=quote(term))): name
                for name, template in self.sources
            }
            for future in as_completed(futures):
                result = future.result()
                if result is not None:
                    results[futures[future]] = result

        ordered = [results[name] for name, _ in self.sources if name in results]
        logger.info(f"[LOOKUP] {len(ordered)}/{len(self.sources)} sources returned usable content")
        return ordered

    def _fetch(self, name: str, url: str) -> Optional[ExternalLookupResult]:
        try:
            resp = self.http.get(url, headers=HEADERS, timeout=self.timeout)
            resp.raise_for_status()
            sentences = html_to_sentences(resp.text)
        except requests.RequestException as e:
            logger.warning(f"[LOOKUP] Failed to fetch {name}: {e}")
            return None
        except Exception as e:
            logger.warning(f"[LOOKUP] Failed to parse {name}: {e}")
            return None

        buckets = bucket_sentences(sentences)
        if not any(buckets.values()):
            return None
        return ExternalLookupResult(
            source=url,
            content=". ".join(sentences[:MAX_CONTENT_SENTENCES]),
            medical_info=buckets,
            timestamp=datetime.now(),
        )


_client: Optional[ExternalLookupClient] = None


def get_lookup_client() -> ExternalLookupClient:
    global _client
    if _client is None:
        _client = ExternalLookupClient()
    return _client
