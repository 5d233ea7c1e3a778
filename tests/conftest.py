import pytest
from click.testing import CliRunner

from streammark.parser import StreamingParser


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def parser() -> StreamingParser:
    """Provides a parser session with the default configuration."""
    return StreamingParser()
