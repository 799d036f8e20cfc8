"""
Offline fallback producers.

Generate plausible resume analyses and interview questions when the
inference service cannot be reached. Output uses the service's wire format
so it passes through the same sanitizers as live responses.
"""

from __future__ import annotations

import random
from typing import Any

from interview_ai.types import HistoryEntry
from interview_ai.validation.responses import generate_id, utc_timestamp

_RESUME_ANALYSES: tuple[dict[str, Any], ...] = (
    {
        "matchScore": 85,
        "missingKeywords": [
            "React", "Node.js", "TypeScript", "AWS", "Docker", "Kubernetes", "GraphQL", "MongoDB",
        ],
        "actionVerbAnalysis": (
            'Your resume uses solid action verbs such as "developed" and "implemented". '
            'Impact-focused verbs like "architected", "spearheaded" and "accelerated" '
            "would better show leadership and technical achievements."
        ),
        "formatSuggestions": [
            'Add quantifiable metrics to achievements (e.g. "Improved performance by 40%")',
            "Use consistent bullet point formatting throughout",
            "Include a professional summary section at the top",
            "Ensure consistent date formatting (MM/YYYY)",
            "Add a relevant technical skills section",
            "Use an ATS-friendly template",
        ],
    },
    {
        "matchScore": 72,
        "missingKeywords": [
            "Python", "Machine Learning", "TensorFlow", "Data Analysis",
            "SQL", "Pandas", "Scikit-learn", "Deep Learning",
        ],
        "actionVerbAnalysis": (
            "Your resume makes good use of technical action verbs. Results-oriented "
            'language such as "delivered", "reduced" and "increased", backed by '
            "specific metrics, would strengthen it further."
        ),
        "formatSuggestions": [
            "Reorder sections to put the most relevant experience first",
            "Add a technical skills section with proficiency levels",
            "Link to portfolio projects or GitHub",
            "Format job titles and companies consistently",
            "List relevant certifications and training",
            "Use standard section headers for ATS scanning",
        ],
    },
    {
        "matchScore": 91,
        "missingKeywords": [
            "Agile", "Scrum", "JIRA", "CI/CD", "Jenkins", "Git", "REST APIs", "Microservices",
        ],
        "actionVerbAnalysis": (
            "Strong action verbs throughout your resume demonstrate leadership and "
            'expertise. A few strategic verbs like "pioneered", "streamlined" and '
            '"mentored" would highlight innovation and team leadership.'
        ),
        "formatSuggestions": [
            "Your resume format is already strong",
            "Consider adding a brief professional summary",
            "Make sure every achievement includes a quantifiable result",
            "Work relevant keywords naturally into the content",
            "Include side projects or open source contributions",
            "Consider a skills matrix for technical competencies",
        ],
    },
)

TECH_KEYWORDS: tuple[str, ...] = (
    "JavaScript", "Python", "Java", "React", "Angular", "Vue", "Node.js",
    "Express", "Django", "Flask", "Spring", "AWS", "Azure", "GCP",
    "Docker", "Kubernetes", "MongoDB", "PostgreSQL", "MySQL", "Redis",
    "GraphQL", "REST", "API", "Microservices", "CI/CD", "Git", "Agile",
    "Scrum", "TensorFlow", "PyTorch", "Machine Learning", "Data Science",
    "SQL", "NoSQL", "DevOps", "Linux", "TypeScript", "HTML", "CSS",
)

MAX_MOCK_KEYWORDS = 8

_QUESTIONS: dict[str, dict[str, tuple[str, ...]]] = {
    "behavioral": {
        "Software Engineer": (
            "Tell me about a time you had to debug a particularly challenging issue. How did you approach it?",
            "Describe a situation where you had to work with a difficult team member. How did you handle it?",
            "Share an example of when you had to learn a new technology quickly for a project.",
            "Tell me about a time you disagreed with a technical decision. What did you do?",
            "Describe a project where you had to balance technical debt against new feature work.",
            "Tell me about a time you mentored a junior developer. How did you approach it?",
        ),
        "Product Manager": (
            "Tell me about a time you had to prioritize features with limited resources. How did you decide?",
            "Describe a situation where you pivoted a product strategy based on user feedback.",
            "Tell me about a time you had to deliver bad news to stakeholders.",
            "Describe a product launch that did not go as planned. What did you learn?",
            "Tell me about a time you made a data-driven decision with incomplete information.",
            "Tell me about a time you had to influence without authority to get a project done.",
        ),
        "Data Scientist": (
            "Tell me about a time your initial hypothesis was wrong. How did you pivot?",
            "Describe a situation where you explained a statistical concept to business stakeholders.",
            "Share an example of working with messy or incomplete data.",
            "Tell me about a time you had to choose between model accuracy and interpretability.",
            "Tell me about a time you discovered bias in your data or model. How did you address it?",
            "Describe how you communicated uncertainty in your findings to decision-makers.",
        ),
    },
    "technical": {
        "Software Engineer": (
            "How would you design a URL shortening service?",
            "Explain the difference between SQL and NoSQL databases. When would you use each?",
            "How would you implement a rate limiter for an API?",
            "What are the trade-offs between microservices and a monolithic architecture?",
            "Explain how you would optimize a slow database query.",
            "How would you handle authentication and authorization in a distributed system?",
        ),
        "Product Manager": (
            "How would you prioritize features for a mobile app with limited development resources?",
            "Walk me through how you would launch a new product in a competitive market.",
            "How would you measure the success of a feature meant to increase engagement?",
            "How would you approach pricing strategy for a SaaS product?",
            "Walk me through your process for creating a product roadmap.",
            "Explain how you would use A/B testing to validate a product hypothesis.",
        ),
        "Data Scientist": (
            "How would you build a recommendation system for an e-commerce platform?",
            "Explain the bias-variance tradeoff and how it affects model selection.",
            "How would you detect and handle outliers in a dataset?",
            "How would you evaluate a classification model trained on imbalanced classes?",
            "Walk me through your process for model validation and preventing overfitting.",
            "Explain how you would handle missing data in a machine learning pipeline.",
        ),
    },
    "case-study": {
        "Software Engineer": (
            "Our mobile app has slow load times. Walk me through how you would investigate and fix this.",
            "We need to migrate a monolith to microservices. How would you approach it?",
            "We see intermittent failures in payment processing. How would you debug this?",
            "API response times doubled after a deployment. How would you investigate?",
            "Our application must handle 10x traffic at peak hours. How would you scale it?",
            "Our CI/CD pipeline is blocking deployments because it is slow. How would you speed it up?",
        ),
        "Product Manager": (
            "User engagement dropped 20% last quarter. How would you investigate and respond?",
            "We want to expand into a new geographic market. Walk me through your approach.",
            "A competitor launched a feature our users keep asking for. How do you respond?",
            "We have five high-priority features and little engineering capacity. How do you prioritize?",
            "We are considering a premium tier for our freemium product. How would you approach it?",
            "Users say onboarding is confusing. How would you improve it?",
        ),
        "Data Scientist": (
            "Click-through on our recommendations is declining. How would you investigate and improve it?",
            "We want to predict churn for our subscription service. Walk me through your approach.",
            "Our fraud model has a high false positive rate. How would you improve it?",
            "Our A/B test results are inconclusive. How would you redesign the experiment?",
            "Model performance has degraded in production over time. How do you diagnose it?",
            "We must explain model decisions to regulators. How do you ensure interpretability?",
        ),
    },
}

_DEFAULT_QUESTIONS = _QUESTIONS["behavioral"]["Software Engineer"]


class MockResponder:
    """Produces fallback payloads.

    Args:
        seed: Seed for the random source, for reproducible output
    """

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)

    def extract_keywords(self, job_description: str, limit: int = 5) -> list[str]:
        """Known tech keywords mentioned in ``job_description``, shuffled."""
        text = job_description.lower()
        found = [keyword for keyword in TECH_KEYWORDS if keyword.lower() in text]
        self._random.shuffle(found)
        return found[:limit]

    def resume_analysis(self, resume_text: str, job_description_text: str) -> dict[str, Any]:
        """Canned analysis with a jittered score and job-specific keywords."""
        base = self._random.choice(_RESUME_ANALYSES)
        score = max(0, min(100, base["matchScore"] + self._random.randint(-5, 4)))

        keywords = list(base["missingKeywords"])
        if job_description_text:
            for keyword in self.extract_keywords(job_description_text)[:3]:
                if keyword not in keywords:
                    keywords.append(keyword)

        return {
            **base,
            "matchScore": score,
            "missingKeywords": keywords[:MAX_MOCK_KEYWORDS],
            "analysisId": generate_id("mock"),
            "timestamp": utc_timestamp(),
        }

    def interview_question(
        self,
        role: str,
        session_type: str,
        history: list[HistoryEntry] | None = None,
    ) -> dict[str, Any]:
        """Pick a question not yet asked in ``history``.

        When the bank for the role and session type is exhausted, a random
        question from another session type is used.
        """
        history = history or []
        key = session_type.lower().replace(" ", "-")
        questions = _QUESTIONS.get(key, {}).get(role, _DEFAULT_QUESTIONS)

        asked = {entry.question for entry in history}
        available = [q for q in questions if q not in asked]

        if available:
            selected = self._random.choice(available)
        else:
            bank = _QUESTIONS[self._random.choice(sorted(_QUESTIONS))]
            selected = self._random.choice(bank.get(role, bank["Software Engineer"]))

        return {
            "questionText": selected,
            "questionId": generate_id("mock"),
            "category": session_type,
            "role": role,
            "timestamp": utc_timestamp(),
        }
