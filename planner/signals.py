"""Keyword-derived weak signals about a company's ML maturity and stack."""
from __future__ import annotations

from planner.log import get_logger

log = get_logger(__name__)

NO_SIGNALS_MESSAGE = "Limited public signals found. Analysis based on job description patterns."

MATURITY_SIGNALS: list[tuple[list[str], str]] = [
    (["production", "scaling", "infrastructure"],
     "Mentions of production systems suggests operational ML maturity"),
    (["experimentation", "mlflow", "wandb", "neptune", "weights & biases"],
     "MLOps tooling mentioned indicates structured experimentation workflow"),
    (["ci/cd", "continuous integration", "deployment pipeline"],
     "CI/CD mentioned suggests automated ML deployment practices"),
    (["research", "paper", "publish", "arxiv"],
     "Research focus suggests academic/research-oriented ML team"),
    (["startup", "early stage", "founding"],
     "Early-stage company suggests building ML infrastructure from scratch"),
    (["enterprise", "fortune 500", "large scale"],
     "Enterprise context suggests complex legacy systems and scale challenges"),
]

INFRA_SIGNALS: list[tuple[list[str], str]] = [
    (["real-time", "streaming", "latency", "milliseconds"],
     "Real-time requirements suggest online inference infrastructure"),
    (["distributed", "kubernetes", "spark", "dask"],
     "Distributed systems mentioned indicates scale requirements"),
    (["aws", "gcp", "azure", "cloud"],
     "Cloud platform mentioned suggests cloud-native ML infrastructure"),
    (["terraform", "infrastructure as code", "iac"],
     "IaC tools suggest infrastructure automation and maturity"),
    (["docker", "containerization"],
     "Containerization suggests modern deployment practices"),
    (["microservices", "service-oriented"],
     "Microservices architecture suggests distributed ML systems"),
]

EVALUATION_SIGNALS: list[tuple[list[str], str]] = [
    (["evaluation", "monitoring", "observability", "ml monitoring"],
     "Focus on evaluation suggests production ML experience"),
    (["a/b testing", "experimentation", "ab test"],
     "A/B testing mentioned suggests data-driven decision making"),
    (["model drift", "data drift", "concept drift"],
     "Drift detection mentioned suggests mature ML monitoring"),
    (["grafana", "prometheus", "datadog", "new relic"],
     "Monitoring tools mentioned suggests operational visibility"),
]

DOMAIN_SIGNALS: list[tuple[list[str], str]] = [
    (["recommendation", "recommender"],
     "Recommendation systems suggest personalization/product ML"),
    (["nlp", "natural language", "llm", "transformer"],
     "NLP/LLM mentioned suggests language model work"),
    (["computer vision", "cv", "image", "video"],
     "Computer vision suggests perception ML problems"),
    (["fraud", "anomaly detection", "security"],
     "Fraud/anomaly detection suggests risk ML applications"),
    (["forecasting", "time series", "prediction"],
     "Forecasting suggests temporal modeling problems"),
]

TAXONOMIES: list[list[tuple[list[str], str]]] = [
    MATURITY_SIGNALS, INFRA_SIGNALS, EVALUATION_SIGNALS, DOMAIN_SIGNALS,
]

TECH_KEYWORDS: list[str] = [
    "pytorch", "tensorflow", "keras", "jax", "scikit-learn", "xgboost",
    "kubernetes", "docker", "terraform", "aws", "gcp", "azure",
    "spark", "flink", "kafka", "redis", "postgres", "mongodb",
    "mlflow", "wandb", "kubeflow", "sagemaker", "vertex ai",
    "react", "node", "python", "java", "go", "rust",
    "graphql", "rest", "grpc",
]

ML_FRAMEWORKS = {"pytorch", "tensorflow", "keras", "jax", "scikit-learn", "xgboost"}
INFRA_TOOLS = {"kubernetes", "docker", "terraform", "spark", "kafka"}


def extract_tech_stack(text: str) -> list[str]:
    """Technology keywords present as substrings, in keyword-list order."""
    low = (text or "").lower()
    return [tech for tech in TECH_KEYWORDS if tech in low]


def collect_weak_signals(job_description: str) -> list[str]:
    """Scan the taxonomies in order; never returns an empty list."""
    text = (job_description or "").lower()
    signals: list[str] = []

    for taxonomy in TAXONOMIES:
        for keywords, message in taxonomy:
            if any(k in text for k in keywords):
                signals.append(message)

    stack = extract_tech_stack(text)
    frameworks = [t for t in stack if t in ML_FRAMEWORKS]
    infra = [t for t in stack if t in INFRA_TOOLS]
    if frameworks:
        signals.append(f"ML frameworks mentioned: {', '.join(frameworks)}")
    if infra:
        signals.append(f"Infrastructure tools: {', '.join(infra)}")

    if not signals:
        return [NO_SIGNALS_MESSAGE]
    log.debug("Collected %d weak signals", len(signals))
    return signals
