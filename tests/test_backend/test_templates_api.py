"""Tests for the template catalog endpoints."""


def test_list_templates(client, auth_headers):
    response = client.get('/api/templates', headers=auth_headers)
    assert response.status_code == 200
    templates = response.get_json()['templates']
    ids = [t['id'] for t in templates]
    assert 'scaffold-inspection' in ids
    scaffold = next(t for t in templates if t['id'] == 'scaffold-inspection')
    assert scaffold['item_count'] > 0


def test_template_detail(client, auth_headers):
    response = client.get('/api/templates/fall-protection', headers=auth_headers)
    assert response.status_code == 200
    data = response.get_json()
    assert data['title'] == 'Fall Protection Inspection'
    assert data['sections'][0]['items'][0]['input_kind'] == 'short_text'


def test_unknown_template(client, auth_headers):
    response = client.get('/api/templates/no-such-template', headers=auth_headers)
    assert response.status_code == 404
    assert response.get_json()['error'] == 'Template not found'
