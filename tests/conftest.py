"""Pytest configuration and shared fixtures."""
import pytest
import tempfile
from pathlib import Path

from morphdict.config import CompileConfig


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_lines():
    """Small inflection list: (word form, lemma, tag)."""
    return [
        ("cats", "cat", "NNS"),
        ("cat", "cat", "NN"),
        ("dogs", "dog", "NNS"),
        ("dog", "dog", "NN"),
        ("ran", "run", "VBD"),
        ("running", "run", "VBG"),
        ("geese", "goose", "NNS"),
        ("mice", "mouse", "NNS"),
        ("better", "good", "JJR"),
        ("unhappier", "unhappy", "JJR"),
        ("café", "café", "NN"),
        ("cafés", "café", "NNS"),
    ]


@pytest.fixture
def write_wordlist(temp_dir):
    """Write raw bytes (or text lines) to a wordlist file and return its path."""
    def _write(content, name="words.txt"):
        path = temp_dir / name
        if isinstance(content, (bytes, bytearray)):
            path.write_bytes(bytes(content))
        else:
            data = "".join("\t".join(cols) + "\n" for cols in content)
            path.write_bytes(data.encode("utf-8"))
        return path
    return _write


@pytest.fixture
def default_config():
    return CompileConfig()
