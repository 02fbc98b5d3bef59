from __future__ import annotations

from volunteer_match.matching.ranking import MatchExplanation
from volunteer_match.matching.stats import MatchingStats
from volunteer_match.models import MatchResult, Opportunity
from volunteer_match.utils.datetime_utils import format_date


def render_match_text(
    position: int,
    result: MatchResult,
    opportunity: Opportunity | None = None,
) -> str:
    heading = _opportunity_heading(result.opportunity_id, opportunity)
    lines = [f"{position}. {heading} | score {result.score:.1f}"]
    if opportunity is not None:
        lines.append(
            f"   Starts: {format_date(opportunity.start_date)}"
            f" | Ends: {format_date(opportunity.end_date)}"
        )
    lines.extend(_reason_lines(result))
    return "\n".join(lines)


def render_volunteer_match_text(position: int, result: MatchResult) -> str:
    lines = [f"{position}. {result.volunteer_id} | score {result.score:.1f}"]
    lines.extend(_reason_lines(result))
    return "\n".join(lines)


def render_explanation_text(
    volunteer_id: str,
    opportunity: Opportunity,
    explanation: MatchExplanation,
) -> str:
    heading = _opportunity_heading(opportunity.id, opportunity)
    reasons = explanation.eligibility.reason_text()
    if explanation.result is None:
        return f"{volunteer_id} is not eligible for {heading}: {reasons}"

    lines = [
        f"{volunteer_id} is eligible for {heading} | score {explanation.result.score:.1f}",
        f"   Eligibility: {reasons}",
    ]
    lines.extend(_reason_lines(explanation.result))
    return "\n".join(lines)


def render_stats_text(stats: MatchingStats) -> str:
    lines = [
        f"Volunteers: {stats.total_volunteers}",
        f"Opportunities: {stats.total_opportunities} ({stats.open_opportunities} open)",
        f"Average skills per volunteer: {stats.average_skills_per_volunteer:.2f}",
        "Average required skills per opportunity: "
        f"{stats.average_required_skills_per_opportunity:.2f}",
    ]
    if stats.top_skills:
        lines.append("Top skills: " + ", ".join(f"{name} ({count})" for name, count in stats.top_skills))
    if stats.top_categories:
        lines.append(
            "Top categories: "
            + ", ".join(f"{name} ({count})" for name, count in stats.top_categories)
        )
    return "\n".join(lines)


def _opportunity_heading(opportunity_id: str, opportunity: Opportunity | None) -> str:
    if opportunity is not None and opportunity.title:
        return f"{opportunity_id} - {opportunity.title}"
    return opportunity_id


def _reason_lines(result: MatchResult) -> list[str]:
    return [
        f"   +{reason.contribution:5.1f}  {reason.factor}: {reason.explanation}"
        for reason in result.reasons
    ]
