import os

import pytest
from dotenv import find_dotenv, load_dotenv

from ai_paralegal_sdk import AiParalegalClient, SessionContext

# Load .env as early as possible (before pytest_collection_modifyitems)
load_dotenv(find_dotenv(usecwd=True))

REQUIRED_ENV = ("AI_PARALEGAL_BASE_URL", "AI_PARALEGAL_API_KEY", "AI_PARALEGAL_EXCHANGE_TOKEN")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    missing = [name for name in REQUIRED_ENV if not os.getenv(name)]
    for item in items:
        if "integration" in item.keywords and missing:
            item.add_marker(pytest.mark.skip(reason=f"Missing {', '.join(missing)} in environment/.env"))


@pytest.fixture(scope="session")
def client():
    with AiParalegalClient() as c:
        yield c


@pytest.fixture(scope="session")
def session(client: AiParalegalClient) -> SessionContext:
    # Exchange tokens are single use; one session serves the whole run.
    return client.start_session(os.environ["AI_PARALEGAL_EXCHANGE_TOKEN"])
