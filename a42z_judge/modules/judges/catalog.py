"""
Built-in judge catalog.

Each entry maps a short judge id to its persona. Credentials are not part of
the catalog; they come from ``DIFY_API_KEY_<JUDGE_ID>`` at startup.
"""

from __future__ import annotations

from typing import Dict, List

from .models import JudgeConfig


BUILTIN_JUDGES: List[JudgeConfig] = [
    JudgeConfig(
        id="receive_data",
        display_name="Technical Analysis",
        description="Code structure, engineering quality and technical depth.",
        query_template=(
            "Perform a technical analysis of this hackathon project. Review the code structure, "
            "engineering quality and technical depth of the GitHub repository {repo_url}."
        ),
        persist=True,
    ),
    JudgeConfig(
        id="business",
        display_name="Business Analysis",
        description="Market fit, monetization and business potential.",
        query_template=(
            "Evaluate the business potential of this hackathon project: market fit, target users, "
            "monetization and competition. GitHub repository: {repo_url}. Pitch document: {repo_pdf}."
        ),
    ),
    JudgeConfig(
        id="sam",
        display_name="Sam Altman",
        description="Ambition, scale and AI-native product thinking.",
        query_template=(
            "As Sam Altman, judge this hackathon project on ambition, potential scale and how "
            "AI-native the product is. GitHub repository: {repo_url}. Pitch document: {repo_pdf}."
        ),
    ),
    JudgeConfig(
        id="li",
        display_name="Feifei Li",
        description="Human-centered AI and data quality.",
        query_template=(
            "As Fei-Fei Li, judge this hackathon project on human-centered AI, data quality and "
            "societal impact. GitHub repository: {repo_url}. Pitch document: {repo_pdf}."
        ),
    ),
    JudgeConfig(
        id="ng",
        display_name="Andrew Ng",
        description="Practical machine learning and deployability.",
        query_template=(
            "As Andrew Ng, judge this hackathon project on practical use of machine learning, "
            "deployability and learning value. GitHub repository: {repo_url}. Pitch document: {repo_pdf}."
        ),
    ),
    JudgeConfig(
        id="paul",
        display_name="Paul Graham",
        description="Startup potential and whether people want it.",
        query_template=(
            "As Paul Graham, judge whether this hackathon project is something people want and "
            "whether it could become a startup. GitHub repository: {repo_url}. Pitch document: {repo_pdf}."
        ),
    ),
    JudgeConfig(
        id="summary",
        display_name="Comprehensive Summary",
        description="Overall summary from the repository and the pitch document.",
        query_template=(
            "Summarize this hackathon project for the judging panel. "
            "Pitch document: {repo_pdf}. GitHub repository: {repo_url}."
        ),
        requires_repository=False,
        persist=True,
    ),
    JudgeConfig(
        id="score",
        display_name="Score",
        description="Numeric scoring of the repository.",
        query_template="Please analyze and score this GitHub repository: {repo_url}",
    ),
]


def builtin_catalog() -> Dict[str, JudgeConfig]:
    return {judge.id: judge for judge in BUILTIN_JUDGES}
