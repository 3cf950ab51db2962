"""
Pytest Configuration and Fixtures.
===================================

Shared fixtures for all test modules:
- Sample CSV data
- Deterministic embedding provider and scripted chat model fakes
- Temporary record stores
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from tests.fakes import HashingEmbedder


# ─────────────────────────────────────────────────────────────────────────────
# Path Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(project_root: Path) -> Path:
    """Get the config file path."""
    return project_root / "config" / "settings.yaml"


# ─────────────────────────────────────────────────────────────────────────────
# Sample Data Fixtures
# ─────────────────────────────────────────────────────────────────────────────


CSV_HEADER = (
    "CRN,SUBJ,CRSE NUM,SEC,Title Short Desc,Primary Instructor First Name,"
    "Primary Instructor Last Name,Primary Instructor Email,Meet Days,"
    "Begin Time,End Time,BLDG,RM"
)


@pytest.fixture
def csv_header() -> str:
    return CSV_HEADER


@pytest.fixture
def sample_csv_text() -> str:
    """A small course export with one malformed row."""
    return "\n".join([
        CSV_HEADER,
        "41234,CS,272,01,Software Development,Phil,Peterson,phpeterson@usfca.edu,MWF,0915,1020,LS,G12",
        "41235,CS,272,02,Software Development,Phil,Peterson,phpeterson@usfca.edu,TR,1300,1445,HR,148",
        "41240,CS,315,01,Computer Architecture,Greg,Benson,benson@usfca.edu,TR,0950,1135,HR,235",
        "41301,PHIL,240,01,Ethics,Jane,Doe,jdoe@usfca.edu,MW,1445,1625,KA,311",
        "41302,PHIL,110,02,Great Philosophical Questions,Ann,Lee,alee@usfca.edu,TR,0800,0945,KA,167",
        "41410,BIOL,385,01,Bioinformatics,Sam,Park,spark@usfca.edu,MWF,1030,1135,LM,365",
        "41520,RHET,103,07,Public Speaking,Phil,Choong,pchoong@usfca.edu,TR,1600,1745,KA,263",
        "41999,MUS,120,01,Guitar I,Staff,,,T,1800",
    ]) + "\n"


@pytest.fixture
def sample_csv_file(temp_dir: Path, sample_csv_text: str) -> Path:
    """Sample CSV written to disk."""
    path = temp_dir / "courses.csv"
    path.write_text(sample_csv_text, encoding="utf-8")
    return path


@pytest.fixture
def sample_course_record():
    """Sample CourseRecord instance."""
    from usf_coursechat.shared.schemas import CourseRecord

    return CourseRecord(
        subject="CS",
        number="272",
        section="01",
        title="Software Development",
        instructor="Phil Peterson",
        email="phpeterson@usfca.edu",
        days="MWF",
        start_time="0915",
        end_time="1020",
        building="LS",
        room="G12",
    )


@pytest.fixture
def make_records():
    """Factory for N distinct CourseRecords."""
    from usf_coursechat.shared.schemas import CourseRecord

    def _make(count: int) -> list:
        return [
            CourseRecord(
                subject="CS" if i % 2 else "MATH",
                number=str(100 + i),
                section="01",
                title=f"Course {i}",
                instructor=f"Instructor {i}",
                email=f"t{i}@usfca.edu",
                days="MWF",
                start_time="0900",
                end_time="1000",
                building="HR",
                room=str(i),
            )
            for i in range(count)
        ]

    return _make


# ─────────────────────────────────────────────────────────────────────────────
# Component Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


@pytest.fixture
def make_store(temp_dir: Path):
    """Factory for record stores persisted under the temp directory."""
    from usf_coursechat.indexing.record_store import RecordStore

    def _make(dimensions: int, collection_name: str = "test_courses", **kwargs):
        return RecordStore(
            dimensions=dimensions,
            collection_name=collection_name,
            persist_directory=temp_dir / "index",
            **kwargs,
        )

    return _make


@pytest.fixture
def record_store(make_store, embedder):
    """Empty record store sized for the hashing embedder."""
    return make_store(embedder.dimensions)


@pytest.fixture
def loaded_store(record_store, embedder, sample_csv_file):
    """Record store loaded from the sample CSV."""
    from usf_coursechat.indexing.builder import IndexBuilder

    IndexBuilder(record_store, embedder).build_from_csv(sample_csv_file)
    return record_store


@pytest.fixture
def retriever(loaded_store, embedder):
    from usf_coursechat.rag.retriever import Retriever

    return Retriever(loaded_store, embedder)


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "requires_api: marks tests that require API keys"
    )


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached settings and providers between tests."""
    from usf_coursechat.indexing.embeddings_base import clear_provider_cache
    from usf_coursechat.shared.config import reload_settings

    yield

    clear_provider_cache()
    reload_settings()
