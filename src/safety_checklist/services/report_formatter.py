"""Pure formatting of analysis results into display, share, email and storage forms."""
import re

from shared.models import now_iso
from shared.schemas import NO_RESPONSE, NumericItem, SelectItem

RISK_BADGES = {
    'critical': 'CRITICAL',
    'high': 'HIGH',
    'moderate': 'MODERATE',
    'low': 'LOW',
}

SHARE_FOOTER = 'Generated with Safety Checklist'


def _bullets(lines, empty='None identified'):
    if not lines:
        return [f"- {empty}"]
    return [f"- {line}" for line in lines]


def format_standard_safety_report(analysis, title):
    """Markdown report for a SafetyAnalysis."""
    risk = analysis.risk_level.value
    lines = [
        f"# Safety Analysis Report: {title}",
        "",
        f"**Risk Level:** {RISK_BADGES.get(risk, risk.upper())}",
        f"**Safety Score:** {analysis.score}/100",
        f"**Compliance Status:** {analysis.compliance_status.value.replace('_', ' ').title()}",
        "",
        "## Summary",
        analysis.summary,
        "",
        "## Critical Issues",
        *_bullets(analysis.critical_issues),
        "",
        "## Recommendations",
        *_bullets(analysis.recommendations, empty='No additional recommendations'),
        "",
        "## Action Items",
    ]
    if analysis.action_items:
        for number, item in enumerate(analysis.action_items, 1):
            line = f"{number}. {item.description} (priority: {item.priority}"
            if item.deadline:
                line += f", due {item.deadline}"
            if item.assignee:
                line += f", owner {item.assignee}"
            lines.append(line + ")")
    else:
        lines.append("- No action items")
    return "\n".join(lines).rstrip() + "\n"


def format_multimodal_report(result, title, blueprint_count, image_count):
    """Markdown report for a MultiModalResult."""
    risk = result.risk_level.value
    lines = [
        f"# Comprehensive Safety Analysis: {title}",
        "",
        f"**Overall Risk Score:** {result.overall_risk_score}/100",
        f"**Risk Level:** {RISK_BADGES.get(risk, risk.upper())}",
        f"**Inputs Analyzed:** checklist, {blueprint_count} blueprint(s), {image_count} image(s)",
        "",
        "## Summary",
        result.summary or 'No summary provided.',
        "",
        "## Checklist Findings",
        *_bullets(result.checklist_findings),
    ]
    if blueprint_count:
        lines += ["", "## Blueprint Analysis"]
        if result.blueprint_findings:
            for finding in result.blueprint_findings:
                lines.append(f"### {finding.file_name}")
                lines += _bullets(finding.observations, empty='No observations')
                if finding.hazards:
                    lines.append("Hazards:")
                    lines += _bullets(finding.hazards)
        else:
            lines.append("- No blueprint findings")
    if image_count:
        lines += ["", "## Image Analysis", *_bullets(result.image_findings)]
    lines += [
        "",
        "## Hazards Detected",
        *_bullets(result.hazards_detected),
        "",
        "## Compliance Gaps",
        *_bullets(result.compliance_gaps),
        "",
        "## Recommendations",
        *_bullets(result.recommendations, empty='No additional recommendations'),
    ]
    return "\n".join(lines).rstrip() + "\n"


def format_for_sharing(report):
    """Plain-text version of a markdown report for share sheets and the clipboard."""
    text = re.sub(r'^#{1,6}\s*', '', report, flags=re.MULTILINE)
    text = re.sub(r'\*\*(.+?)\*\*', r'\1', text)
    text = re.sub(r'\n{3,}', '\n\n', text).strip()
    return f"{text}\n\n{SHARE_FOOTER}"


def format_for_email(report, title):
    return {
        'subject': f"Safety Checklist Report: {title}",
        'body': f"Safety checklist report for {title}\n\n{format_for_sharing(report)}",
    }


def format_for_database(report, template_id, user_id):
    return {
        'template_id': template_id,
        'user_id': user_id,
        'report': report,
        'format': 'markdown',
        'created_at': now_iso(),
    }


def _answer_lines(item, response):
    value = response.value if response and response.value != "" else None
    if isinstance(item, SelectItem):
        return [f"    [{'x' if option == value else ' '}] {option}" for option in item.options]
    if isinstance(item, NumericItem):
        bounds = []
        if item.min_value is not None:
            bounds.append(f"min {item.min_value:g}")
        if item.max_value is not None:
            bounds.append(f"max {item.max_value:g}")
        suffix = f" ({', '.join(bounds)})" if bounds else ""
        return [f"    Answer: {value or NO_RESPONSE}{suffix}"]
    # Short and long text
    if value is None:
        return [f"    Answer: {NO_RESPONSE}"]
    first, *rest = value.splitlines() or ['']
    return [f"    Answer: {first}"] + [f"            {line}" for line in rest]


def format_printable_checklist(template, responses):
    """Print view of a checklist and its current answers as plain text."""
    lines = [template.title, '=' * len(template.title)]
    if template.description:
        lines.append(template.description)
    for section in template.sections:
        lines += ['', section.title, '-' * len(section.title)]
        for number, item in enumerate(section.items, 1):
            marker = ' [CRITICAL]' if item.critical else ''
            response = responses.get(item.id)
            if response and response.flagged:
                marker += ' [FLAGGED]'
            lines.append(f"{number}. {item.question}{marker}")
            lines += _answer_lines(item, response)
            if response is None:
                continue
            if response.notes:
                lines.append(f"    Notes: {response.notes}")
            if response.deadline:
                lines.append(f"    Deadline: {response.deadline}")
            if response.images:
                lines.append(f"    Photos: {len(response.images)}")
            if response.blueprints:
                lines.append(f"    Blueprints: {', '.join(b.file_name for b in response.blueprints)}")
    return "\n".join(lines) + "\n"
