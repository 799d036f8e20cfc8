#!/usr/bin/env python3
"""
Interview preparation session example.

Scores a resume against a job description, then generates a short set of
interview questions. With no reachable service the client falls back to
offline mock results, which are marked as degraded.

Usage:
    export INTERVIEW_AI_BASE_URL="https://your-inference-service"
    export INTERVIEW_AI_API_KEY="your-api-key"
    python examples/interview_session.py
"""

import asyncio

from interview_ai import ErrorEnvelope, InterviewAiClient

RESUME = """
Software engineer with six years of experience building Python web services.
Led the migration of a billing platform to PostgreSQL, cutting query latency
by 40%. Mentored three junior developers and introduced code review guidelines.
"""

JOB_DESCRIPTION = """
We are hiring a backend engineer to design REST APIs in Python, deploy
services with Docker and Kubernetes on AWS, and own CI/CD pipelines.
"""


async def main() -> None:
    """Run an interview preparation session."""
    async with InterviewAiClient.from_env() as client:
        issues = client.validate_config()["issues"]
        for issue in issues:
            print(f"Config warning: {issue}")

        health = await client.check_health()
        print(f"Service health: {health.status}")
        print()

        try:
            analysis = await client.analyze_resume(RESUME, JOB_DESCRIPTION)
        except ErrorEnvelope as e:
            print(f"{e.title}: {e.user_message} {e.suggestion}")
            return

        print(f"Match score: {analysis.match_score}")
        print(f"Missing keywords: {', '.join(analysis.missing_keywords)}")
        if analysis.degraded:
            print(f"(offline result, reason: {analysis.degraded_reason})")
        print()

        question_set = await client.generate_interview_questions(
            "Software Engineer", "Technical", count=3
        )
        for index, question in enumerate(question_set.questions, 1):
            marker = " [offline]" if question.degraded else ""
            print(f"{index}. {question.question_text}{marker}")
        print()

        suggestions = await client.get_question_suggestions(
            {"targetRole": "Data Scientist", "experienceLevel": "mid"}, limit=3
        )
        for group in suggestions.suggestions:
            print(f"{group.session_type}: {group.questions[0].question_text}")
        print()

        status = client.get_status()
        for name, service in status["services"].items():
            print(f"{name}: {service['status']}")


if __name__ == "__main__":
    asyncio.run(main())
