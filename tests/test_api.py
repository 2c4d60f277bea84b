import pytest
import sys
import os
import json
from datetime import date

from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from app import create_app
from models import Base, get_engine
from services import ReferenceModelService

MODEL = {
    'reference_model': {
        'metadata': {
            '_generation_timestamp': '2024-01-02T03:04:05.000000Z',
            'title': 'TMF Reference Model',
            'version': '3.2.1',
            'version_date': '2021-03-01',
        },
        'artifacts': [
            {
                'Zone #': '01',
                'Artifact name': 'Trial Master File Plan',
                'TMF Artifacts (Non-device)': {'Sponsor Document': 'X'},
                'embeddings': {'source': 'Zone #: 01', 'vector': [0.1, 0.2]},
            },
            {
                'Zone #': '02',
                'Artifact name': 'Protocol',
                'Sub-artifacts': ['Protocol', 'Amendment'],
            },
        ],
    },
    'glossary': {
        'TMF': 'Trial Master File see ICH E6',
        'IRB': 'Institutional Review Board',
    },
}


@pytest.fixture
def engine():
    engine = get_engine('sqlite://', connect_args={'check_same_thread': False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        ReferenceModelService(session).store(MODEL)
    return engine


@pytest.fixture
def client(engine):
    app = create_app(engine)
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


def test_metadata(client):
    rv = client.get('/api/metadata')
    assert rv.status_code == 200
    data = json.loads(rv.data)
    assert data['version'] == '3.2.1'
    assert data['_generation_timestamp'] == '2024-01-02T03:04:05.000000Z'


def test_artifacts_in_sheet_order(client):
    rv = client.get('/api/artifacts')
    assert rv.status_code == 200
    data = json.loads(rv.data)
    assert data['_count'] == 2
    assert [a['Zone #'] for a in data['items']] == ['01', '02']
    assert data['items'][0]['embeddings']['vector'] == [0.1, 0.2]
    assert data['items'][1]['Sub-artifacts'] == ['Protocol', 'Amendment']


def test_artifacts_filtered_by_section(client):
    rv = client.get('/api/artifacts', query_string={'section': 'TMF Artifacts (Non-device)'})
    data = json.loads(rv.data)
    assert data['_count'] == 1
    assert data['items'][0]['Artifact name'] == 'Trial Master File Plan'


def test_single_artifact(client):
    rv = client.get('/api/artifacts/1')
    assert rv.status_code == 200
    assert json.loads(rv.data)['Artifact name'] == 'Protocol'


def test_unknown_artifact(client):
    rv = client.get('/api/artifacts/99')
    assert rv.status_code == 404
    assert 'error' in json.loads(rv.data)


def test_glossary(client):
    rv = client.get('/api/glossary')
    assert json.loads(rv.data) == MODEL['glossary']


def test_glossary_keeps_sheet_order(client):
    assert list(json.loads(client.get('/api/glossary').data)) == ['TMF', 'IRB']
    assert list(json.loads(client.get('/api/export').data)['glossary']) == ['TMF', 'IRB']


def test_glossary_term_case_insensitive(client):
    rv = client.get('/api/glossary/tmf')
    assert rv.status_code == 200
    assert json.loads(rv.data) == {'term': 'TMF', 'definition': 'Trial Master File see ICH E6'}


def test_unknown_glossary_term(client):
    rv = client.get('/api/glossary/XYZ')
    assert rv.status_code == 404


def test_export_matches_json_output_shape(client):
    rv = client.get('/api/export')
    data = json.loads(rv.data)
    assert list(data) == ['_metadata', 'artifacts', 'glossary']
    assert data['artifacts']['_count'] == 2
    assert data['_metadata']['title'] == 'TMF Reference Model'


def test_store_replaces_previous_model(engine):
    smaller = {
        'reference_model': {'metadata': MODEL['reference_model']['metadata'], 'artifacts': []},
        'glossary': {},
    }
    with Session(engine) as session:
        service = ReferenceModelService(session)
        service.store(smaller)
        assert service.get_artifacts() == []
        assert service.get_glossary() == {}
        assert service.get_metadata()['version'] == '3.2.1'


def test_empty_database_metadata_404():
    engine = get_engine('sqlite://', connect_args={'check_same_thread': False}, poolclass=StaticPool)
    app = create_app(engine)
    with app.test_client() as client:
        rv = client.get('/api/metadata')
    assert rv.status_code == 404


def test_date_cells_stored_as_iso_strings(engine):
    dated = {
        'reference_model': {
            'metadata': MODEL['reference_model']['metadata'],
            'artifacts': [{'Zone #': '01', 'Dates': {'Effective': date(2022, 5, 6)}}],
        },
        'glossary': {},
    }
    with Session(engine) as session:
        ReferenceModelService(session).store(dated)

    app = create_app(engine)
    with app.test_client() as client:
        rv = client.get('/api/artifacts')
    assert rv.status_code == 200
    assert json.loads(rv.data)['items'][0]['Dates'] == {'Effective': '2022-05-06'}
