"""End-to-end tests for compiling a single wordlist."""
import pickle

import pytest

from morphdict import compiler
from morphdict.automaton import load_dictionary
from morphdict.assembler import expand
from morphdict.compiler import CompilationUnit, Stage, compile_wordlist
from morphdict.config import CompileConfig
from morphdict.diagnostics import BLANK_LINE, TWO_COLUMNS, UTF8_BOM
from morphdict.errors import (
    BuildFailureError,
    InputNotFoundError,
    InputReadError,
    MalformedRecordError,
    ReservedByteConflictError,
    UnsortedInputError,
)
from morphdict.scanner import open_wordlist


class TestScenarios:
    """Behaviour on small, hand-written inputs."""

    def test_two_column_record_warns(self, write_wordlist, temp_dir):
        path = write_wordlist(b"cat\tcats\n")
        out = temp_dir / "out.dict"

        result = compile_wordlist(path, out)

        assert result.ok
        assert result.entry_count == 1
        assert [w.kind for w in result.warnings] == [TWO_COLUMNS]
        assert "2 columns" in result.warnings[0].message

        entries = list(load_dictionary(out).sequences())
        assert expand(entries[0], ord("+"), "suffix") == (b"cat", b"cats", None)

    def test_sorted_three_column_input(self, write_wordlist, temp_dir):
        path = write_wordlist(b"cat\tcats\tNN\ndog\tdogs\tNN\n")
        out = temp_dir / "out.dict"

        result = compile_wordlist(path, out)

        assert result.ok
        assert result.stage == Stage.DONE
        assert result.entry_count == 2
        assert result.line_count == 2
        assert result.warnings == []
        assert len(load_dictionary(out)) == 2

    def test_separator_inside_lemma(self, write_wordlist, temp_dir):
        path = write_wordlist(b"cat\tca+ts\tNN\n")
        out = temp_dir / "out.dict"

        result = compile_wordlist(path, out)

        assert not result.ok
        assert isinstance(result.error, ReservedByteConflictError)
        assert result.error.line == 1
        assert result.stage == Stage.ABORTED
        assert result.failed_stage == Stage.ASSEMBLING
        assert not out.exists()

    def test_four_columns(self, write_wordlist, temp_dir):
        path = write_wordlist(b"cat\tcats\tNN\ndog\tdogs\tNN\tx\nfox\tfoxes\tNN\n")
        out = temp_dir / "out.dict"

        result = compile_wordlist(path, out)

        assert isinstance(result.error, MalformedRecordError)
        assert result.error.line == 2
        assert result.error.column_count == 4
        assert not out.exists()

    def test_assume_sorted_violation(self, write_wordlist, temp_dir):
        path = write_wordlist(b"dog\tdogs\tNN\ncat\tcats\tNN\n")
        out = temp_dir / "out.dict"

        result = compile_wordlist(path, out, CompileConfig(assume_sorted=True))

        assert isinstance(result.error, UnsortedInputError)
        assert result.error.line == 2
        assert result.failed_stage == Stage.ORDERING
        assert not out.exists()
        assert list(temp_dir.iterdir()) == [path]

    def test_empty_input(self, write_wordlist, temp_dir):
        path = write_wordlist(b"")
        out = temp_dir / "out.dict"

        result = compile_wordlist(path, out)

        assert result.ok
        assert result.entry_count == 0
        assert result.warnings == []
        assert len(load_dictionary(out)) == 0


def test_unsorted_input_is_sorted_by_default(write_wordlist, temp_dir):
    path = write_wordlist(b"dog\tdogs\tNN\ncat\tcats\tNN\n")
    out = temp_dir / "out.dict"

    result = compile_wordlist(path, out)

    assert result.ok
    words = [expand(e, ord("+"), "suffix")[0] for e in load_dictionary(out).sequences()]
    assert words == [b"cat", b"dog"]


def test_missing_input(temp_dir):
    result = compile_wordlist(temp_dir / "missing.txt", temp_dir / "out.dict")

    assert isinstance(result.error, InputNotFoundError)
    assert result.failed_stage == Stage.START
    assert "does not exist" in str(result.error)


def test_raise_for_error(write_wordlist, temp_dir):
    path = write_wordlist(b"just-one-column\n")
    result = compile_wordlist(path, temp_dir / "out.dict")

    with pytest.raises(MalformedRecordError):
        result.raise_for_error()


def test_bom_warning(write_wordlist, temp_dir):
    path = write_wordlist(b"\xef\xbb\xbfcat\tcats\tNN\n")
    result = compile_wordlist(path, temp_dir / "out.dict")

    assert result.ok
    assert [w.kind for w in result.warnings] == [UTF8_BOM]


def test_bom_checked_on_first_entry_in_input_order(write_wordlist, temp_dir):
    # The BOM entry sorts last but is the first one read
    path = write_wordlist(b"\xef\xbb\xbfzebra\tzebras\tNN\napple\tapples\tNN\n")
    result = compile_wordlist(path, temp_dir / "out.dict")
    assert UTF8_BOM in [w.kind for w in result.warnings]


def test_blank_lines_warn_and_continue(write_wordlist, temp_dir):
    path = write_wordlist(b"cat\tcats\tNN\n\r\n\ndog\tdogs\tNN\n")
    result = compile_wordlist(path, temp_dir / "out.dict")

    assert result.ok
    assert result.entry_count == 2
    assert [w.line for w in result.warnings if w.kind == BLANK_LINE] == [2, 3]


def test_synthesis_kind_accepts_two_columns_silently(write_wordlist, temp_dir):
    path = write_wordlist(b"cat\tcats\ndog\tdogs\n")
    result = compile_wordlist(path, temp_dir / "out.dict", CompileConfig(kind="synthesis"))

    assert result.ok
    assert result.warnings == []


def test_compile_is_deterministic(write_wordlist, temp_dir, sample_lines):
    path = write_wordlist(sample_lines)
    first = temp_dir / "first.dict"
    second = temp_dir / "second.dict"

    assert compile_wordlist(path, first).ok
    assert compile_wordlist(path, second).ok
    assert first.read_bytes() == second.read_bytes()


@pytest.mark.parametrize("encoder", ["none", "suffix", "prefix", "infix"])
@pytest.mark.parametrize("format_name", ["marisa", "marisa-bytes"])
def test_entries_expand_to_input(write_wordlist, temp_dir, sample_lines, encoder, format_name):
    path = write_wordlist(sample_lines)
    out = temp_dir / "out.dict"
    config = CompileConfig(encoder=encoder, format=format_name)

    assert compile_wordlist(path, out, config).ok

    dictionary = load_dictionary(out)
    rows = {
        tuple(c.decode("utf-8") for c in expand(e, dictionary.separator, encoder))
        for e in dictionary.sequences()
    }
    assert rows == set(sample_lines)


def test_failed_compile_keeps_previous_output(write_wordlist, temp_dir):
    out = temp_dir / "out.dict"
    good = write_wordlist(b"cat\tcats\tNN\n", name="good.txt")
    assert compile_wordlist(good, out).ok
    before = out.read_bytes()

    bad = write_wordlist(b"cat\tcats\tNN\tx\n", name="bad.txt")
    assert not compile_wordlist(bad, out).ok
    assert out.read_bytes() == before
    assert sorted(p.name for p in temp_dir.iterdir()) == ["bad.txt", "good.txt", "out.dict"]


def test_output_directory_created(write_wordlist, temp_dir):
    path = write_wordlist(b"cat\tcats\tNN\n")
    out = temp_dir / "nested" / "dir" / "out.dict"

    assert compile_wordlist(path, out).ok
    assert out.exists()


def test_gzip_input(temp_dir):
    import gzip
    path = temp_dir / "words.txt.gz"
    path.write_bytes(gzip.compress(b"cat\tcats\tNN\n"))

    result = compile_wordlist(path, temp_dir / "out.dict")
    assert result.ok
    assert result.entry_count == 1


def test_unit_keeps_line_numbers(write_wordlist):
    path = write_wordlist(b"\ncat\tcats\tNN\n\ndog\tdogs\tNN\n")
    unit = CompilationUnit(path, CompileConfig())
    with unit.open_input() as stream:
        unit.collect(stream)

    assert unit.line_numbers == [2, 4]
    assert unit.line_count == 4
    assert unit.entries == [b"cat+As+NN", b"dog+As+NN"]


def test_result_survives_pickling(write_wordlist, temp_dir):
    path = write_wordlist(b"a\tb\tc\td\n")
    result = compile_wordlist(path, temp_dir / "out.dict")

    restored = pickle.loads(pickle.dumps(result))
    assert isinstance(restored.error, MalformedRecordError)
    assert restored.error.line == 1
    assert restored.error.column_count == 4
    assert restored.to_dict()["error"]["kind"] == "MalformedRecord"


class TestFatalErrors:
    """Failures that abort the unit after the input was opened."""

    def test_output_path_is_a_directory(self, write_wordlist, temp_dir):
        path = write_wordlist(b"cat\tcats\tNN\n")
        out = temp_dir / "out.dict"
        out.mkdir()

        result = compile_wordlist(path, out)

        assert isinstance(result.error, BuildFailureError)
        assert result.error.kind == "BuildFailure"
        assert result.failed_stage == Stage.HANDOFF
        assert result.entry_count == 1
        assert out.is_dir()
        assert [p.name for p in temp_dir.iterdir() if p.name.endswith(".tmp")] == []

    def test_corrupt_gzip_input(self, write_wordlist, temp_dir):
        path = write_wordlist(b"cat\tcats\tNN\n", name="words.txt.gz")

        result = compile_wordlist(path, temp_dir / "out.dict")

        assert isinstance(result.error, InputReadError)
        assert result.error.kind == "InputReadFailure"
        assert result.failed_stage == Stage.SCANNING
        assert not (temp_dir / "out.dict").exists()

    @pytest.mark.parametrize("content", [
        b"cat\tcats\tNN\tx\n",
        b"cat\tca+ts\tNN\n",
        b"cat\tcats\tNN\n",
    ])
    def test_input_stream_is_closed(self, write_wordlist, temp_dir, monkeypatch, content):
        opened = []

        def tracking_open(path):
            stream = open_wordlist(path)
            opened.append(stream)
            return stream

        monkeypatch.setattr(compiler, "open_wordlist", tracking_open)
        compile_wordlist(write_wordlist(content), temp_dir / "out.dict")

        assert len(opened) == 1
        assert opened[0].closed
