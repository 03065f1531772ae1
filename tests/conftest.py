"""Shared pytest fixtures for statementflow tests."""

import tempfile
import os
from pathlib import Path
import pytest

from statementflow.classifiers.base import Classifier, ClassifierReply
from statementflow.database.factories import create_sqlite_database
from statementflow.domain.account import AccountService
from statementflow.domain.categorization import CategorizationEngine
from statementflow.domain.category import CategoryService
from statementflow.domain.errors import ClassifierError
from statementflow.domain.ingestion import IngestionService
from statementflow.settings import Settings

ENV_VARS = (
    "STATEMENTFLOW_DB_PATH",
    "STATEMENTFLOW_LOG_LEVEL",
    "STATEMENTFLOW_LOG_DIR",
    "STATEMENTFLOW_CONFIG_DIR",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "CLASSIFIER_TIMEOUT",
    "CLASSIFIER_BATCH_SIZE",
    "CLASSIFIER_MAX_WORKERS",
    "CLASSIFIER_MAX_RETRIES",
)


class FakeClassifier(Classifier):
    """In-memory classifier answering from a fixed table of replies."""

    def __init__(self, replies=None, omit_from_batch=(), fail_batch=False, fail_single=False):
        self.replies = dict(replies or {})
        self.omit_from_batch = set(omit_from_batch)
        self.fail_batch = fail_batch
        self.fail_single = fail_single
        self.calls = []
        self.batch_calls = []

    def classify(self, description, category_names):
        self.calls.append(description)
        if self.fail_single:
            raise ClassifierError("classifier unavailable")
        return self.replies.get(description, ClassifierReply())

    def classify_batch(self, descriptions, category_names):
        self.batch_calls.append(list(descriptions))
        if self.fail_batch:
            raise ClassifierError("batch request timed out")
        return {
            index: self.replies[description]
            for index, description in enumerate(descriptions)
            if description in self.replies and description not in self.omit_from_batch
        }


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep the developer's environment (API keys, db path) out of tests."""
    for name in ENV_VARS:
        # setenv first so the variable is removed again on teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def categories(temp_db):
    """Seed the default categories and return their IDs by name."""
    CategoryService(temp_db).seed_default_categories()
    return {cat.name: cat.id for cat in temp_db.list_categories()}


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account owned by 'alice'."""
    account_id = account_service.create_account(user_id="alice", name="Checking", bank_name="Test Bank")
    return account_service.get_account(account_id)


@pytest.fixture
def fake_classifier():
    return FakeClassifier()


@pytest.fixture
def engine(temp_db, categories, fake_classifier):
    """Categorization engine over seeded categories and the fake classifier."""
    return CategorizationEngine(temp_db, classifier=fake_classifier)


@pytest.fixture
def ingestion_service(temp_db, engine):
    return IngestionService(temp_db, engine=engine)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def run_cli(cli_runner, temp_db):
    """Invoke the CLI against the temporary database with default settings."""
    from statementflow.cli.main import cli

    def invoke(*args):
        return cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, *args],
            obj={"settings": Settings()},
        )

    return invoke


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
