"""Tests for shared pydantic schemas."""
import pytest
from pydantic import ValidationError, TypeAdapter
from shared.enums import ComplianceStatus, RiskLevel
from shared.schemas import (
    ChecklistItem, ChecklistResponseCreate, MultiModalResult, NumericItem, Response, SafetyAnalysis,
    SelectItem, ShortTextItem, Snapshot, Template
)

item_adapter = TypeAdapter(ChecklistItem)


class TestChecklistItems:
    def test_discriminated_union(self):
        item = item_adapter.validate_python({'id': 'x', 'question': 'Q?', 'input_kind': 'select', 'options': ['Yes', 'No']})
        assert isinstance(item, SelectItem)
        assert item.options == ('Yes', 'No')
        item = item_adapter.validate_python({'id': 'n', 'question': 'How high?', 'input_kind': 'numeric', 'min_value': 0})
        assert isinstance(item, NumericItem)

    def test_select_requires_options(self):
        with pytest.raises(ValidationError):
            item_adapter.validate_python({'id': 'x', 'question': 'Q?', 'input_kind': 'select'})
        with pytest.raises(ValidationError):
            item_adapter.validate_python({'id': 'x', 'question': 'Q?', 'input_kind': 'select', 'options': []})

    def test_select_options_unique(self):
        with pytest.raises(ValidationError, match='options must be unique'):
            item_adapter.validate_python({'id': 'x', 'question': 'Q?', 'input_kind': 'select', 'options': ['Yes', 'Yes']})

    def test_options_only_on_select(self):
        with pytest.raises(ValidationError):
            item_adapter.validate_python({'id': 't', 'question': 'Name', 'input_kind': 'short_text', 'options': ['a']})

    def test_unknown_input_kind(self):
        with pytest.raises(ValidationError):
            item_adapter.validate_python({'id': 'x', 'question': 'Q?', 'input_kind': 'checkbox'})

    def test_items_are_frozen(self):
        item = ShortTextItem(id='a', question='Name')
        with pytest.raises(ValidationError):
            item.question = 'Other'


class TestTemplate:
    def test_duplicate_item_ids_rejected(self):
        with pytest.raises(ValidationError, match="duplicate item id 'a'"):
            Template.model_validate({
                'id': 'dup',
                'title': 'Dup',
                'sections': [
                    {'title': 'One', 'items': [{'id': 'a', 'question': 'Q1', 'input_kind': 'short_text'}]},
                    {'title': 'Two', 'items': [{'id': 'a', 'question': 'Q2', 'input_kind': 'long_text'}]},
                ],
            })

    def test_lookup_helpers(self, five_item_template):
        assert five_item_template.total_items == 5
        assert [i.id for i in five_item_template.iter_items()] == ['q1', 'q2', 'q3', 'q4', 'q5']
        assert five_item_template.get_item('q4').question == 'Question 4'
        assert five_item_template.get_item('missing') is None


class TestResponse:
    def test_defaults(self):
        response = Response(timestamp='2024-05-01T08:00:00.000Z')
        assert response.value == ""
        assert response.images == []
        assert response.blueprints == []
        assert response.flagged is False
        assert response.notes is None

    def test_notes_sanitized(self):
        response = Response(timestamp='2024-05-01T08:00:00.000Z', notes='<img src=x onerror=alert(1)>Check <em>rail</em>')
        assert 'onerror' not in response.notes
        assert '<em>rail</em>' in response.notes

    def test_timestamp_must_be_iso8601(self):
        assert Response(timestamp='2024-05-01T08:00:00').timestamp == '2024-05-01T08:00:00'
        with pytest.raises(ValidationError):
            Response(timestamp='yesterday')
        with pytest.raises(ValidationError):
            Snapshot(template_id='t', timestamp='yesterday')

    def test_snapshot_is_frozen(self):
        snapshot = Snapshot(template_id='t', timestamp='2024-05-01T08:00:00.000Z')
        with pytest.raises(ValidationError):
            snapshot.title = 'changed'


class TestChecklistResponseCreate:
    def test_missing_report_defaults_to_empty(self):
        assert ChecklistResponseCreate(template_id='t', report=None).report == ""

    def test_report_kept_verbatim(self):
        assert ChecklistResponseCreate(template_id='t', report='# Report').report == '# Report'


class TestAnalysisSchemas:
    def test_safety_analysis_normalizes_model_output(self):
        analysis = SafetyAnalysis.model_validate({
            'risk_level': ' Medium ',
            'action_items': ['Replace damaged harness', {'description': 'Re-train crew', 'priority': 'high'}],
            'compliance_status': 'requires_attention',
        })
        assert analysis.risk_level == RiskLevel.MODERATE
        assert analysis.score == 75
        assert [a.description for a in analysis.action_items] == ['Replace damaged harness', 'Re-train crew']
        assert analysis.action_items[1].priority == 'high'
        assert analysis.compliance_status == ComplianceStatus.REQUIRES_ATTENTION

    def test_safety_analysis_rejects_unknown_risk(self):
        with pytest.raises(ValidationError):
            SafetyAnalysis.model_validate({'risk_level': 'apocalyptic'})

    def test_multimodal_result_risk_level(self):
        result = MultiModalResult.model_validate({'risk_level': 'HIGH', 'overall_risk_score': 62})
        assert result.risk_level == RiskLevel.HIGH
        assert result.blueprint_findings == []
