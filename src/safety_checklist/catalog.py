"""Static template catalog loaded from data/templates.json."""
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import TypeAdapter

from shared.schemas import Template, TemplateSummary

logger = logging.getLogger(__name__)

CATALOG_PATH = Path(__file__).parent / 'data' / 'templates.json'

UNKNOWN_TEMPLATE = Template(id='unknown', title='Unknown Checklist', sections=())

_template_list = TypeAdapter(List[Template])


def load_templates(path=CATALOG_PATH):
    """Parse and validate a catalog file into an id -> Template mapping."""
    with open(path, 'r', encoding='utf-8') as f:
        raw = json.load(f)
    templates = _template_list.validate_python(raw)
    catalog = {}
    for template in templates:
        if template.id in catalog:
            raise ValueError(f"Duplicate template id in catalog: {template.id}")
        catalog[template.id] = template
    logger.info(f"Loaded {len(catalog)} checklist templates from {path}")
    return catalog


@lru_cache(maxsize=1)
def get_catalog():
    """Return the process-wide catalog (loaded once, read-only)."""
    return load_templates()


def get_template(template_id):
    """Return the template for an id, or None when it is not in the catalog."""
    return get_catalog().get(template_id)


def get_template_or_unknown(template_id):
    template = get_template(template_id)
    if template is None:
        logger.warning(f"Unknown checklist template requested: {template_id}")
        return UNKNOWN_TEMPLATE
    return template


def list_summaries():
    """Summaries of all templates, ordered by title."""
    return sorted(
        (TemplateSummary(
            id=t.id,
            title=t.title,
            description=t.description,
            category=t.category,
            section_count=len(t.sections),
            item_count=t.total_items,
        ) for t in get_catalog().values()),
        key=lambda s: s.title,
    )
