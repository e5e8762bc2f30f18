"""Tests for report formatting."""
from shared.schemas import (
    ActionItem, BlueprintFinding, BlueprintUpload, MultiModalResult, Response, SafetyAnalysis, Template,
)
from safety_checklist.services.report_formatter import (
    SHARE_FOOTER, format_for_database, format_for_email, format_for_sharing, format_multimodal_report,
    format_printable_checklist, format_standard_safety_report,
)

TS = '2024-05-01T08:00:00.000Z'


def test_standard_report_sections():
    analysis = SafetyAnalysis(
        risk_level='high', score=55, compliance_status='requires_attention',
        critical_issues=['Missing guardrails'],
        action_items=[ActionItem(description='Install guardrails', priority='high', deadline='2024-05-03')],
        summary='Fall hazards present',
    )
    report = format_standard_safety_report(analysis, 'Fall Protection Inspection')
    assert report.startswith('# Safety Analysis Report: Fall Protection Inspection')
    assert '**Risk Level:** HIGH' in report
    assert '**Compliance Status:** Requires Attention' in report
    assert '- Missing guardrails' in report
    assert '1. Install guardrails (priority: high, due 2024-05-03)' in report
    assert '- No additional recommendations' in report


def test_multimodal_report_omits_unused_sections():
    result = MultiModalResult(overall_risk_score=70, risk_level='critical', summary='Photos show gaps',
                              image_findings=['Worker without harness'])
    report = format_multimodal_report(result, 'Scaffold Inspection', 0, 1)
    assert '**Inputs Analyzed:** checklist, 0 blueprint(s), 1 image(s)' in report
    assert '## Image Analysis' in report
    assert '## Blueprint Analysis' not in report


def test_multimodal_report_blueprint_findings():
    result = MultiModalResult(blueprint_findings=[
        BlueprintFinding(file_name='level4.pdf', observations=['Edge at grid C'], hazards=['Unprotected edge'])
    ])
    report = format_multimodal_report(result, 'Scaffold Inspection', 1, 0)
    assert '### level4.pdf' in report
    assert '- Unprotected edge' in report


def test_sharing_strips_markdown():
    text = format_for_sharing('# Title\n\n**Risk Level:** HIGH\n\n\n\nDone')
    assert text == f'Title\n\nRisk Level: HIGH\n\nDone\n\n{SHARE_FOOTER}'


def test_email_and_database_forms():
    email = format_for_email('# Report', 'Scaffold Inspection')
    assert email['subject'] == 'Safety Checklist Report: Scaffold Inspection'
    assert email['body'].endswith(SHARE_FOOTER)
    record = format_for_database('# Report', 'scaffold-inspection', 3)
    assert record['format'] == 'markdown'
    assert record['user_id'] == 3
    assert record['created_at'].endswith('Z')


def test_printable_checklist():
    template = Template.model_validate({
        'id': 'print', 'title': 'Print Check',
        'sections': [{'title': 'Checks', 'items': [
            {'id': 's', 'question': 'Guardrails?', 'input_kind': 'select', 'options': ['Yes', 'No'], 'critical': True},
            {'id': 'n', 'question': 'Height', 'input_kind': 'numeric', 'min_value': 0, 'max_value': 200},
            {'id': 't', 'question': 'Notes', 'input_kind': 'long_text'},
        ]}],
    })
    responses = {
        's': Response(value='No', timestamp=TS, flagged=True, notes='East side open', deadline='2024-05-03',
                      images=['data:image/png;base64,AA'],
                      blueprints=[BlueprintUpload(id='bp', file_name='level4.pdf')]),
        't': Response(value='line one\nline two', timestamp=TS),
    }
    text = format_printable_checklist(template, responses)
    assert '1. Guardrails? [CRITICAL] [FLAGGED]' in text
    assert '    [ ] Yes' in text and '    [x] No' in text
    assert '    Answer: No response (min 0, max 200)' in text
    assert '    Answer: line one\n            line two' in text
    assert '    Notes: East side open' in text
    assert '    Deadline: 2024-05-03' in text
    assert '    Photos: 1' in text
    assert '    Blueprints: level4.pdf' in text
