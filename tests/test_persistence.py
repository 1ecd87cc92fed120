"""Tests for saving stage results."""

import json

import pytest

from hybsearch.errors import FilesystemError
from hybsearch.persistence import ResultPersister


class TestPersist:
    """Stage results are written to dest_dir/<stage>."""

    def test_text_result_gets_one_trailing_newline(self, tmp_path):
        path = ResultPersister().persist(tmp_path, "align", "ACGT")

        assert path == tmp_path / "align"
        assert path.read_text(encoding="utf-8") == "ACGT\n"

    def test_structured_result_is_tab_indented_json(self, tmp_path):
        value = {"topology": [1, 2]}
        path = ResultPersister().persist(tmp_path, "tree", value)

        content = path.read_text(encoding="utf-8")
        assert content == '{\n\t"topology": [\n\t\t1,\n\t\t2\n\t]\n}\n'
        assert json.loads(content[:-1]) == value

    def test_non_ascii_is_written_as_is(self, tmp_path):
        path = ResultPersister().persist(tmp_path, "names", {"species": "Ωmega"})
        assert "Ωmega" in path.read_text(encoding="utf-8")

    def test_second_write_replaces_first(self, tmp_path):
        persister = ResultPersister()
        persister.persist(tmp_path, "align", "first")
        persister.persist(tmp_path, "align", {"second": True})

        assert (tmp_path / "align").read_text(encoding="utf-8") == '{\n\t"second": true\n}\n'

    @pytest.mark.parametrize("stage", ["", ".", "..", "../escape", "nested/stage", "win\\stage"])
    def test_stage_must_be_plain_file_name(self, tmp_path, stage):
        with pytest.raises(FilesystemError):
            ResultPersister().persist(tmp_path, stage, "x")

    def test_write_failure_raises_filesystem_error(self, tmp_path):
        with pytest.raises(FilesystemError):
            ResultPersister().persist(tmp_path / "missing", "align", "ACGT")


class TestPrepareDestination:
    def test_creates_directory_named_after_input(self, tmp_path):
        dest = ResultPersister().prepare_destination(tmp_path / "out" / "nested", tmp_path / "data" / "sample.gb")

        assert dest == tmp_path / "out" / "nested" / "sample.gb"
        assert dest.is_dir()

    def test_existing_directory_is_fine(self, tmp_path):
        persister = ResultPersister()
        persister.prepare_destination(tmp_path, "sample.gb")
        assert persister.prepare_destination(tmp_path, "sample.gb").is_dir()

    def test_failure_raises_filesystem_error(self, tmp_path):
        blocker = tmp_path / "out"
        blocker.write_text("not a directory")

        with pytest.raises(FilesystemError):
            ResultPersister().prepare_destination(blocker, "sample.gb")
