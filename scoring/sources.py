"""Curated source, institution and topic vocabularies used for scoring.

The lists are static lookup data: domain fragments are matched against an
item's host (and source name), topic keywords against query and item text.

Source Tiers:
    HIGHLY_RELIABLE: Wire services, major financial press, top journals,
        government statistics and elite research institutions.
    MODERATELY_RELIABLE: Mainstream and trade press, developer platforms.
    LESS_RELIABLE: Social networks, forums, open blogging platforms and
        tabloids.
"""

HIGHLY_RELIABLE = (
    "reuters.com", "apnews.com", "bloomberg.com", "wsj.com", "ft.com",
    "economist.com", "hbr.org", "nature.com", "science.org", "sciencedirect.com",
    "thelancet.com", "nejm.org", "nih.gov", "cdc.gov", "who.int", "sec.gov",
    "federalreserve.gov", "imf.org", "worldbank.org", "oecd.org", "bls.gov",
    "census.gov", "harvard.edu", "mit.edu", "stanford.edu", "berkeley.edu",
    "ox.ac.uk", "cam.ac.uk", "mckinsey.com", "pitchbook.com", "morningstar.com",
    "spglobal.com", "moodys.com", "arxiv.org", "ieee.org", "acm.org",
)

MODERATELY_RELIABLE = (
    "cnbc.com", "forbes.com", "fortune.com", "businessinsider.com", "techcrunch.com",
    "wired.com", "theverge.com", "arstechnica.com", "nytimes.com", "washingtonpost.com",
    "theguardian.com", "bbc.com", "bbc.co.uk", "npr.org", "cnn.com", "marketwatch.com",
    "barrons.com", "axios.com", "venturebeat.com", "zdnet.com", "crunchbase.com",
    "investopedia.com", "medium.com", "github.com", "stackoverflow.com", "wikipedia.org",
    "substack.com", "linkedin.com",
)

LESS_RELIABLE = (
    "reddit.com", "quora.com", "twitter.com", "x.com", "facebook.com", "instagram.com",
    "tiktok.com", "youtube.com", "pinterest.com", "tumblr.com", "blogspot.com",
    "wordpress.com", "buzzfeed.com", "dailymail.co.uk", "thesun.co.uk", "nypost.com",
)

FACT_CHECKERS = (
    "factcheck.org", "politifact.com", "snopes.com", "fullfact.org",
    "apnews.com/hub/ap-fact-check", "reuters.com/fact-check", "leadstories.com",
    "checkyourfact.com", "truthorfiction.com", "afp.com/factcheck",
)

ESTABLISHED_NEWS = (
    "reuters.com", "apnews.com", "bloomberg.com", "wsj.com", "ft.com", "nytimes.com",
    "washingtonpost.com", "theguardian.com", "bbc.com", "bbc.co.uk", "npr.org",
    "economist.com", "cnbc.com", "axios.com",
)

SCIENTIFIC_JOURNALS = (
    "nature.com", "science.org", "sciencedirect.com", "springer.com", "wiley.com",
    "thelancet.com", "nejm.org", "jamanetwork.com", "cell.com", "plos.org",
    "pnas.org", "arxiv.org", "ssrn.com", "ieee.org", "acm.org", "pubmed",
)

PRESTIGIOUS_INSTITUTIONS = (
    "harvard", "stanford", "mit", "massachusetts institute of technology", "berkeley",
    "princeton", "yale", "columbia", "oxford", "cambridge", "caltech", "chicago",
    "wharton", "insead", "london school of economics", "eth zurich",
)

RESEARCH_ORGANIZATIONS = (
    "national bureau of economic research", "nber", "brookings", "rand corporation",
    "pew research", "federal reserve", "world bank", "imf", "oecd", "mckinsey global institute",
    "national institutes of health", "max planck", "cern", "allen institute",
)

CORPORATE_RESEARCH = (
    "google research", "deepmind", "microsoft research", "ibm research", "openai",
    "meta ai", "bell labs", "nvidia research",
)

PROFESSIONAL_CREDENTIALS = (
    "phd", "ph.d", "md", "m.d", "jd", "mba", "cpa", "cfa", "cfp", "frm",
    "professor", "prof.", "dr.", "fellow", "analyst", "economist", "researcher",
    "scientist", "engineer", "partner", "managing director", "chief",
)

LOW_QUALITY_MARKERS = ("blog", "forum", "wiki", "answers", "press-release", "sponsored")

# Topic vocabularies used for query/content topic overlap.
TOPIC_KEYWORDS: dict[str, tuple[str, ...]] = {
    "finance": (
        "finance", "financial", "investment", "bank", "banking", "stock", "bond",
        "equity", "fund", "capital", "asset", "interest rate", "dividend", "credit",
    ),
    "business": (
        "business", "company", "corporate", "enterprise", "startup", "strategy",
        "revenue", "profit", "ceo", "management", "industry", "merger", "acquisition",
    ),
    "economics": (
        "economy", "economic", "gdp", "inflation", "recession", "growth", "employment",
        "unemployment", "monetary", "fiscal", "trade", "macroeconomic",
    ),
    "technology": (
        "technology", "tech", "ai", "artificial intelligence", "machine learning", "software",
        "cloud", "digital", "data", "automation", "platform", "semiconductor", "saas",
    ),
    "real_estate": (
        "real estate", "property", "housing", "mortgage", "rent", "commercial property",
        "residential", "reit",
    ),
    "crypto": (
        "crypto", "bitcoin", "ethereum", "blockchain", "token", "defi", "nft", "stablecoin",
    ),
    "investing": (
        "investing", "investor", "portfolio", "venture capital", "private equity",
        "hedge fund", "returns", "valuation", "ipo", "funding round", "vc",
    ),
    "regulation": (
        "regulation", "regulatory", "compliance", "sec", "law", "policy", "legislation",
        "antitrust", "sanction",
    ),
}

# Sources specialized in each topic; a match aligns the source with the query.
TOPIC_SOURCES: dict[str, tuple[str, ...]] = {
    "finance": ("bloomberg.com", "wsj.com", "ft.com", "marketwatch.com", "barrons.com", "morningstar.com"),
    "business": ("hbr.org", "forbes.com", "fortune.com", "businessinsider.com", "mckinsey.com"),
    "economics": ("economist.com", "imf.org", "worldbank.org", "oecd.org", "federalreserve.gov", "bls.gov"),
    "technology": ("techcrunch.com", "wired.com", "theverge.com", "arstechnica.com", "venturebeat.com", "github.com"),
    "real_estate": ("realtor.com", "zillow.com", "inman.com", "cbre.com"),
    "crypto": ("coindesk.com", "cointelegraph.com", "theblock.co", "decrypt.co"),
    "investing": ("pitchbook.com", "crunchbase.com", "morningstar.com", "seekingalpha.com"),
    "regulation": ("sec.gov", "federalregister.gov", "finra.org", "ftc.gov"),
}

# Source types that indicate first-hand or institutional material
INSTITUTIONAL_SOURCE_TYPES = frozenset({"government", "research", "academic", "industry", "official"})


def host_matches(host: str, domains: tuple[str, ...]) -> bool:
    """Whether a host (or host/path) belongs to any listed domain fragment."""
    if not host:
        return False
    return any(
        host == d or host.endswith("." + d) or ("/" in d and d in host) or (("." not in d) and d in host)
        for d in domains
    )


def reliability_tier(host: str) -> str | None:
    """Three-tier reliability lookup: 'high', 'moderate', 'low' or None."""
    if host_matches(host, HIGHLY_RELIABLE):
        return "high"
    if host_matches(host, MODERATELY_RELIABLE):
        return "moderate"
    if host_matches(host, LESS_RELIABLE):
        return "low"
    return None


def tld_kind(host: str) -> str | None:
    """Classify a host by its institutional top-level domain."""
    if not host:
        return None
    if host.endswith(".edu") or ".ac." in host or host.endswith(".edu.au"):
        return "edu"
    if host.endswith(".gov") or host.endswith(".mil") or ".gov." in host:
        return "gov"
    if host.endswith(".org") or host.endswith(".int"):
        return "org"
    return None
