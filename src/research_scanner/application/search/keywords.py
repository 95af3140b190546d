"""
Static Keyword Tables

Curated, read-only vocabularies shared by the query builder, tagger and
scorer. All tables are built once at import time from tuples and
MappingProxyType so nothing can mutate them at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

# =============================================================================
# Topics -> upstream search phrases
# =============================================================================

ALL_TOPICS = "All"

TOPIC_KEYWORDS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        ALL_TOPICS: (),
        "QuantFinance": (
            "quantitative finance",
            "empirical asset pricing",
            "asset pricing",
            "factor investing",
        ),
        "Momentum": ("momentum strategy", "price momentum", "trend following"),
        "Crypto": ("cryptocurrency", "bitcoin", "ethereum", "defi", "blockchain finance"),
        "ML": (
            "machine learning finance",
            "neural network finance",
            "deep learning asset pricing",
            "financial nlp",
            "large language model finance",
        ),
        "HFT": (
            "high frequency trading",
            "market microstructure",
            "limit order book",
            "liquidity provision",
        ),
        "Risk": ("risk management", "value at risk", "portfolio optimization", "tail risk"),
        "FixedIncome": (
            "fixed income",
            "yield curve",
            "corporate bond",
            "sovereign debt",
            "treasury",
        ),
        "InternationalTax": (
            "international taxation",
            "beps",
            "corporate tax avoidance",
            "global tax",
        ),
        "TransferPricing": ("transfer pricing", "profit shifting", "multinational tax"),
        "ValueChain": ("global value chain", "supply chain finance"),
        "Transformation": (
            "digital transformation finance",
            "fintech innovation",
            "financial automation",
        ),
    }
)

# Used when nothing at all narrows the query
DEFAULT_TOPIC_PHRASES: tuple[str, ...] = ("quantitative finance",)

# Substituted for the general journal bucket so it never returns off-domain works
GENERAL_BUCKET_SEARCH = "finance economics"


# =============================================================================
# Tag rules
# =============================================================================


@dataclass(frozen=True, slots=True)
class TagRule:
    """
    One topical label and the substrings that trigger it.

    Attributes:
        label: Tag added when the rule fires
        triggers: Any of these substrings fires the rule
        requires_any: When set, at least one of these must also appear
        unless_any: When any of these appear the rule is suppressed
    """

    label: str
    triggers: tuple[str, ...]
    requires_any: tuple[str, ...] = ()
    unless_any: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if not any(trigger in text for trigger in self.triggers):
            return False
        if self.requires_any and not any(term in text for term in self.requires_any):
            return False
        return not any(term in text for term in self.unless_any)


HFT_TRIGGERS = ("high frequency", "hft", "microstructure", "order book", "limit order")

TAG_RULES: tuple[TagRule, ...] = (
    # Asset classes & markets
    TagRule("Crypto", ("crypto", "bitcoin", "ether", "blockchain", "defi")),
    TagRule("Equities", ("equity", "stock", "equities")),
    TagRule("Fixed Income", ("bond", "fixed income", "treasur", "yield curve")),
    TagRule("Derivatives", ("option", "derivative", "volatility", "implied vol", "hedging")),
    TagRule("FX", ("fx", "currency", "exchange rate")),
    TagRule("Commodities", ("commodit",)),
    TagRule("ETF", ("etf",)),
    # Strategies & concepts
    TagRule("Momentum", ("momentum", "trend")),
    TagRule("Reversal", ("reversal", "mean reversion")),
    TagRule("Arbitrage", ("arbitrage",)),
    TagRule("Value", ("value",), requires_any=("growth", "investing")),
    TagRule("Carry", ("carry",)),
    # Methodology & technology
    TagRule(
        "ML/AI",
        (
            "machine learning",
            "neural network",
            "deep learning",
            "reinforcement learning",
            "lstm",
            "transformer",
        ),
    ),
    TagRule("NLP", ("nlp", "sentiment", "textual", "llm", "language model")),
    TagRule("HFT", HFT_TRIGGERS),
    TagRule("Stats", ("statistical", "econometric")),
    # Core topics
    TagRule("Risk Mgmt", ("risk", "drawdown", "var", "shortfall")),
    TagRule("Portfolio", ("portfolio", "allocation", "optimization")),
    TagRule("Liquidity", ("liquidity",), unless_any=HFT_TRIGGERS),
    TagRule("Asset Pricing", ("factor", "alpha", "asset pricing", "beta")),
    TagRule("Macro", ("macro", "inflation", "monetary", "gdp")),
    TagRule("ESG", ("esg", "sustainable", "climate")),
    # Domain extensions
    TagRule("Tax", ("tax", "beps")),
    TagRule("Transfer Pricing", ("transfer pricing",)),
    TagRule("Value Chain", ("supply chain", "value chain")),
    TagRule("Labor", ("labor", "employment", "wage")),
    TagRule("Portfolio Mgmt", ("portfolio management", "portfolio manager", "fund manager")),
    TagRule("Asset Allocation", ("asset allocation", "tactical allocation", "strategic allocation")),
)

QUANT_FALLBACK_TRIGGER = "quant"
QUANT_FALLBACK_TAG = "Quant"
DEFAULT_FALLBACK_TAG = "Finance"


# =============================================================================
# Scoring vocabularies
# =============================================================================

HIGH_VALUE_KEYWORDS: tuple[str, ...] = (
    "momentum",
    "alpha",
    "arbitrage",
    "neural network",
    "transformer",
    "liquidity",
    "high frequency",
    "microstructure",
    "portfolio optimization",
    "asset pricing",
    "volatility",
    "predicting",
    "forecasting",
)

VIRAL_KEYWORDS: tuple[str, ...] = (
    "large language model",
    "llm",
    "generative ai",
    "chatgpt",
    "deep learning",
    "reinforcement learning",
    "crash risk",
    "tail risk",
    "climate risk",
)


# =============================================================================
# OpenAlex filtering
# =============================================================================

ALLOWED_WORK_TYPES: frozenset[str] = frozenset({"article", "preprint", "report", "dissertation"})

JUNK_TITLE_TERMS: tuple[str, ...] = (
    "front matter",
    "back matter",
    "issue information",
    "table of contents",
    "editorial board",
    "masthead",
    "cover image",
    "index to",
    "author index",
)
