"""
Shared fixtures: an application on an in-memory database, plus a workspace
with one connected Stripe account.
"""

import pytest

from formforge import create_app, db
from formforge.models import Workspace, OAuthProvider, Form
from formforge.reference_data import clear_reference_caches


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RATELIMIT_ENABLED': False,
        'SELF_HOSTED': False,
        'HASHIDS_SALT': 'test-salt',
        'HASHIDS_MIN_LENGTH': 8,
        'APP_URL': 'https://forms.example.com',
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()

    clear_reference_caches()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def workspace(app):
    workspace = Workspace(name='Acme')
    db.session.add(workspace)
    db.session.commit()
    return workspace


@pytest.fixture
def stripe_provider(workspace):
    provider = OAuthProvider(provider='stripe', provider_user_id='acct_123')
    db.session.add(provider)
    workspace.providers.append(provider)
    db.session.commit()
    return provider


@pytest.fixture
def form(workspace):
    form = Form(slug='contact', title='Contact', workspace_id=workspace.id, editable_submissions=True)
    form.properties = [
        {'id': 'name', 'name': 'Name', 'type': 'text'},
        {'id': 'email', 'name': 'Email', 'type': 'email'},
    ]
    db.session.add(form)
    db.session.commit()
    return form
