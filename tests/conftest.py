"""Pytest configuration and fixtures."""

import shutil
from pathlib import Path

import pytest
from dotenv import load_dotenv

from js_to_ts.config import Settings
from js_to_ts.parsing.parser import CodeParser
from js_to_ts.source.project import Project

# Load .env file at test collection time
load_dotenv(Path(__file__).parent.parent / ".env")

FIXTURES_PATH = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def parser() -> CodeParser:
    """A parser shared across tests; tree-sitter parsers are cached on it."""
    return CodeParser()


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the process environment cache."""
    return Settings()


@pytest.fixture
def make_project(tmp_path: Path, parser: CodeParser):
    """Build an in-memory project from a {relative path: source} mapping."""

    def _make(files: dict[str, str]) -> Project:
        project = Project(tmp_path, parser=parser)
        for relative_path, content in files.items():
            project.add_source(relative_path, content)
        return project

    return _make


@pytest.fixture
def write_files(tmp_path: Path):
    """Write a {relative path: source} mapping under tmp_path and return the root."""

    def _write(files: dict[str, str]) -> Path:
        for relative_path, content in files.items():
            path = tmp_path / relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return tmp_path

    return _write


@pytest.fixture
def fixture_project(tmp_path: Path):
    """Copy a named project from tests/fixtures into tmp_path and return its root."""

    def _copy(name: str) -> Path:
        target = tmp_path / name
        shutil.copytree(FIXTURES_PATH / name, target)
        return target.resolve()

    return _copy
