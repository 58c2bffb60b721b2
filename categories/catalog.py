"""Built-in category catalog.

The catalog is organized in three priority bands:

    0  Headline themes shown first (Key Insights, Investment Trends)
    1  Broad business overviews
    2  Specialist themes

plus the fallback "General Results" bucket (priority 5) and the
"All Results" catch-all (priority 99).

Primary keywords identify a theme on their own; secondary keywords support
a match; query terms point at the category when they appear in the query.
"""

from models.category import Category

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    # === Priority 0: headline themes ===
    Category(
        id="keyInsights",
        name="Key Insights",
        description="Essential information and key takeaways",
        priority=0,
        primary_keywords=(
            "key insight", "key takeaway", "takeaway", "highlight", "key finding",
            "most important", "bottom line", "in summary", "tl;dr",
        ),
        secondary_keywords=(
            "important", "essential", "critical", "crucial", "significant", "notable",
            "insight", "key",
        ),
        query_terms=("insight", "insights", "key", "summary", "takeaways", "overview"),
    ),
    Category(
        id="investmentTrends",
        name="Investment Trends",
        description="Future investment opportunities and market trends",
        priority=0,
        business=True,
        primary_keywords=(
            "investment", "invest", "funding", "venture capital", "vc", "investor",
            "trend", "growth", "forecast", "outlook", "opportunity", "emerging", "startup",
        ),
        secondary_keywords=(
            "2024", "2025", "2026", "ai investment", "tech investment", "market trend",
            "roi", "return", "portfolio", "asset allocation", "prediction", "future",
            "capital inflow", "deal volume",
        ),
        query_terms=(
            "investment", "invest", "investing", "trends", "trend", "ai", "future",
            "2025", "funding", "venture",
        ),
    ),
    # === Priority 1: broad overviews ===
    Category(
        id="marketOverview",
        name="Market Overview",
        description="General information about the market landscape",
        priority=1,
        business=True,
        primary_keywords=("market", "industry", "sector", "landscape", "market size", "market overview"),
        secondary_keywords=("overview", "segment", "vertical", "players", "demand", "supply", "share"),
        query_terms=("market", "markets", "industry", "sector", "landscape"),
    ),
    Category(
        id="financialOverview",
        name="Financial Overview",
        description="Financial information and metrics",
        priority=1,
        business=True,
        primary_keywords=("financial", "finance", "revenue", "profit", "earnings", "capital", "cash flow"),
        secondary_keywords=("money", "funding", "cost", "expense", "budget", "cash", "income", "quarter"),
        query_terms=("financial", "finance", "revenue", "earnings", "money"),
    ),
    Category(
        id="businessStrategy",
        name="Business Strategy",
        description="Business models and strategic approaches",
        priority=1,
        business=True,
        primary_keywords=("strategy", "business model", "roadmap", "strategic", "go-to-market"),
        secondary_keywords=("approach", "plan", "vision", "mission", "goal", "objective", "tactic", "initiative"),
        query_terms=("strategy", "strategic", "business", "plan"),
    ),
    Category(
        id="industryInsights",
        name="Industry Insights",
        description="Specific insights about the industry",
        priority=1,
        business=True,
        primary_keywords=("industry", "sector", "vertical", "market segment", "niche"),
        secondary_keywords=("specialization", "incumbent", "players", "value chain", "supplier", "customer base"),
        query_terms=("industry", "sector", "vertical"),
    ),
    # === Priority 2: specialist themes ===
    Category(
        id="marketIntelligence",
        name="Market Intelligence",
        description="Detailed market analysis and competitive dynamics",
        priority=2,
        business=True,
        primary_keywords=(
            "market analysis", "market share", "competitive landscape", "market intelligence",
            "market positioning", "competitive dynamics", "industry trends",
        ),
        secondary_keywords=("disruption", "competitor", "benchmark", "research", "survey", "analyst"),
        query_terms=("analysis", "competitors", "competition", "intelligence"),
    ),
    Category(
        id="growthStrategy",
        name="Growth Strategy",
        description="Strategies for growth and expansion",
        priority=2,
        business=True,
        primary_keywords=(
            "customer acquisition", "expansion", "scaling", "market penetration", "user growth",
            "growth levers", "tam",
        ),
        secondary_keywords=("retention", "market segmentation", "new markets", "growth", "adoption"),
        query_terms=("growth", "scale", "expand", "expansion"),
    ),
    Category(
        id="investmentStrategy",
        name="Investment Strategy",
        description="Investment approaches and portfolio management",
        priority=2,
        business=True,
        primary_keywords=(
            "investment thesis", "portfolio construction", "asset allocation", "capital allocation",
            "diversification", "risk-adjusted return", "value creation",
        ),
        secondary_keywords=("portfolio", "strategic investment", "allocation", "hedge", "rebalancing"),
        query_terms=("portfolio", "allocation", "thesis"),
    ),
    Category(
        id="financialPerformance",
        name="Financial Performance",
        description="Financial metrics and performance indicators",
        priority=2,
        business=True,
        primary_keywords=(
            "unit economics", "profitability", "margin", "ebitda", "balance sheet",
            "profit and loss", "financial statement", "cash flow",
        ),
        secondary_keywords=("revenue", "cost structure", "income", "p&l", "operating", "net loss"),
        query_terms=("profitability", "margins", "performance", "ebitda"),
    ),
    Category(
        id="valuationBenchmarking",
        name="Valuation & Benchmarking",
        description="Valuation methodologies and comparative benchmarks",
        priority=2,
        business=True,
        primary_keywords=("valuation", "dcf", "multiples", "comparables", "rule of 40", "cac/ltv"),
        secondary_keywords=("benchmark", "worth", "price", "peer", "competitor", "premium", "discount"),
        query_terms=("valuation", "valuations", "worth", "multiples"),
    ),
    Category(
        id="exitLiquidity",
        name="Exit & Liquidity",
        description="Exit strategies and liquidity events",
        priority=2,
        business=True,
        primary_keywords=(
            "exit strategy", "ipo", "public offering", "liquidity event", "strategic buyer",
            "secondary transactions", "exit",
        ),
        secondary_keywords=("acquisition", "merger", "listing", "spac", "lock-up"),
        query_terms=("exit", "ipo", "liquidity"),
    ),
    Category(
        id="maConsolidation",
        name="M&A & Consolidation",
        description="Mergers, acquisitions, and industry consolidation",
        priority=2,
        business=True,
        primary_keywords=("merger", "acquisition", "m&a", "consolidation", "buyout", "takeover"),
        secondary_keywords=("roll-up", "synergy", "deal structures", "integration", "fragmentation", "deal"),
        query_terms=("merger", "mergers", "acquisition", "acquisitions", "m&a"),
    ),
    Category(
        id="technologyDigital",
        name="Technology & Digital",
        description="Technology infrastructure and digital transformation",
        priority=2,
        primary_keywords=(
            "ai", "artificial intelligence", "machine learning", "software", "cloud",
            "digital transformation", "automation",
        ),
        secondary_keywords=(
            "digitization", "data-driven", "analytics", "infrastructure", "technology stack",
            "hardware", "platform", "model", "chip",
        ),
        query_terms=("ai", "technology", "tech", "digital", "software"),
    ),
    Category(
        id="operationalEfficiency",
        name="Operational Efficiency",
        description="Operational improvements and efficiency gains",
        priority=2,
        business=True,
        primary_keywords=(
            "cost optimization", "margin expansion", "supply chain", "operations", "efficiency",
            "productivity", "process improvement",
        ),
        secondary_keywords=("scalability", "execution", "streamlining", "lean", "throughput"),
        query_terms=("efficiency", "operations", "productivity"),
    ),
    Category(
        id="dataStrategy",
        name="Data Strategy",
        description="Data management, governance, and monetization",
        priority=2,
        primary_keywords=(
            "data governance", "data management", "data architecture", "data pipeline",
            "data lake", "data warehouse", "data monetization",
        ),
        secondary_keywords=("interoperability", "infrastructure", "monetization", "privacy", "analytics"),
        query_terms=("data",),
    ),
    Category(
        id="platformEconomics",
        name="Platform Economics",
        description="Platform business models and network effects",
        priority=2,
        business=True,
        primary_keywords=(
            "network effects", "marketplace", "two-sided market", "multi-sided platform",
            "ecosystem", "platform",
        ),
        secondary_keywords=("virality", "defensibility", "partnerships", "value chain", "developers"),
        query_terms=("platform", "marketplace", "ecosystem"),
    ),
    Category(
        id="customerMarket",
        name="Customer & Market",
        description="Customer engagement and market positioning",
        priority=2,
        business=True,
        primary_keywords=(
            "customer experience", "customer engagement", "customer journey", "customer satisfaction",
            "brand strategy", "pricing",
        ),
        secondary_keywords=("differentiation", "user experience", "loyalty", "churn", "segment", "consumer"),
        query_terms=("customer", "customers", "consumer", "pricing", "brand"),
    ),
    Category(
        id="riskCompliance",
        name="Risk & Compliance",
        description="Risk management and regulatory compliance",
        priority=2,
        primary_keywords=("regulatory", "compliance", "risk management", "regulation", "governance"),
        secondary_keywords=("downside protection", "risk hedging", "security", "safety", "mitigation", "lawsuit", "fine"),
        query_terms=("risk", "risks", "regulation", "compliance", "legal"),
    ),
    Category(
        id="sustainabilityESG",
        name="Sustainability & ESG",
        description="Environmental, social, and governance factors",
        priority=2,
        primary_keywords=("esg", "sustainability", "sustainable", "impact investing", "climate", "carbon"),
        secondary_keywords=("environmental", "social", "stakeholder", "corporate responsibility", "emissions", "renewable"),
        query_terms=("esg", "sustainability", "climate", "green"),
    ),
    Category(
        id="capitalMarkets",
        name="Capital Markets",
        description="Fundraising and capital market activities",
        priority=2,
        business=True,
        primary_keywords=(
            "fundraising", "capital markets", "private equity", "public markets", "private markets",
            "debt financing", "financing",
        ),
        secondary_keywords=("debt", "equity", "leverage", "investor targeting", "bond", "raise"),
        query_terms=("fundraising", "capital", "financing", "equity"),
    ),
    Category(
        id="economicTrends",
        name="Economic Trends",
        description="Macroeconomic factors and business cycles",
        priority=2,
        business=True,
        primary_keywords=(
            "macroeconomic", "interest rate", "inflation", "gdp", "recession", "monetary policy",
            "fiscal policy", "business cycle",
        ),
        secondary_keywords=("economy", "economic", "central bank", "unemployment", "tariff", "expansion"),
        query_terms=("economy", "economic", "inflation", "rates", "recession"),
    ),
    Category(
        id="performanceMetrics",
        name="Performance Metrics",
        description="Key performance indicators and metrics",
        priority=2,
        business=True,
        primary_keywords=("kpi", "kpis", "irr", "moic", "performance indicators", "j-curve"),
        secondary_keywords=("metrics", "measurement", "benchmarking", "capital deployment", "attribution analysis"),
        query_terms=("kpi", "metrics", "performance"),
    ),
    Category(
        id="competitiveAdvantage",
        name="Competitive Advantage",
        description="Competitive moats and market positioning",
        priority=2,
        business=True,
        primary_keywords=(
            "competitive advantage", "moat", "barriers to entry", "first-mover",
            "value proposition", "category leadership",
        ),
        secondary_keywords=("differentiation", "positioning", "unique selling proposition", "defensible"),
        query_terms=("advantage", "moat", "competitive"),
    ),
    # === Special buckets ===
    Category(
        id="general",
        name="General Results",
        description="Results that do not fit a specific theme",
        priority=5,
        fallback=True,
    ),
    Category(
        id="all",
        name="All Results",
        description="Every result for the query",
        priority=99,
        catch_all=True,
    ),
)
