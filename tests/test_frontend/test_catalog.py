"""Tests for the static template catalog."""
import json
import pytest
from pydantic import ValidationError
from safety_checklist.catalog import (
    UNKNOWN_TEMPLATE, get_template, get_template_or_unknown, list_summaries, load_templates,
)
from shared.schemas import SelectItem


def test_bundled_catalog_loads():
    summaries = list_summaries()
    assert [s.title for s in summaries] == sorted(s.title for s in summaries)
    ids = {s.id for s in summaries}
    assert {'fall-protection', 'scaffold-inspection', 'excavation-trenching'} <= ids
    for summary in summaries:
        assert summary.item_count == get_template(summary.id).total_items


def test_select_items_carry_options():
    template = get_template('scaffold-inspection')
    item = template.get_item('sc_type')
    assert isinstance(item, SelectItem)
    assert 'Suspended' in item.options


def test_unknown_template():
    assert get_template('no-such-template') is None
    assert get_template_or_unknown('no-such-template') is UNKNOWN_TEMPLATE
    assert UNKNOWN_TEMPLATE.total_items == 0


def write_catalog(tmp_path, templates):
    path = tmp_path / 'templates.json'
    path.write_text(json.dumps(templates))
    return path


def test_duplicate_template_ids_rejected(tmp_path):
    path = write_catalog(tmp_path, [{'id': 'a', 'title': 'A'}, {'id': 'a', 'title': 'Again'}])
    with pytest.raises(ValueError, match='Duplicate template id'):
        load_templates(path)


def test_select_without_options_rejected(tmp_path):
    path = write_catalog(tmp_path, [{'id': 'a', 'title': 'A', 'sections': [
        {'title': 'S', 'items': [{'id': 'q', 'question': 'Pick', 'input_kind': 'select'}]}
    ]}])
    with pytest.raises(ValidationError):
        load_templates(path)
