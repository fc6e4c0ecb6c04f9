"""Annotation patcher tests."""

import pytest

from codequest.errors import MalformedInputError, QuestIOError
from codequest.feedback import ANNOTATION_TAG, apply_annotations, comment_leader, patch_lines, strip_annotations
from codequest.feedback.patcher import apply_to_file
from codequest.schemas import Annotation

SIX_LINES = ["l1", "l2", "l3", "    l4", "    l5", "l6"]


def ann(line: int, comment: str, file: str = "app.go") -> Annotation:
    return Annotation(file=file, line=line, comment=comment)


class TestPatchLines:
    def test_descending_insertion(self):
        lines, placed = patch_lines(SIX_LINES, [ann(2, "a"), ann(5, "b"), ann(5, "c")], "//")

        assert lines == [
            "l1",
            "// [quest] a",
            "l2",
            "l3",
            "    l4",
            "    // [quest] b",
            "    // [quest] c",
            "    l5",
            "l6",
        ]
        assert [a.comment for a in placed] == ["a", "b", "c"]

    def test_original_lines_keep_their_order(self):
        lines, _ = patch_lines(SIX_LINES, [ann(5, "x"), ann(2, "y"), ann(5, "z")], "//")
        assert [line for line in lines if ANNOTATION_TAG not in line] == SIX_LINES

    @pytest.mark.parametrize("bad_line", [0, -3, 7, 100])
    def test_out_of_range_dropped(self, bad_line):
        lines, placed = patch_lines(SIX_LINES, [ann(bad_line, "lost"), ann(3, "kept")], "//")
        assert [a.comment for a in placed] == ["kept"]
        assert lines[2] == "// [quest] kept"
        assert len(lines) == 7

    def test_last_line_is_reachable(self):
        lines, placed = patch_lines(SIX_LINES, [ann(6, "end")], "//")
        assert lines[-2:] == ["// [quest] end", "l6"]

    def test_tab_indentation_copied(self):
        lines, _ = patch_lines(["func f() {", "\t\treturn", "}"], [ann(2, "why?")], "//")
        assert lines[1] == "\t\t// [quest] why?"

    def test_multiline_comment_flattened(self):
        lines, _ = patch_lines(["x"], [ann(1, "first\nsecond")], "#")
        assert lines[0] == "# [quest] first second"


class TestStripAnnotations:
    def test_only_tagged_lines_removed(self):
        lines = [
            "// [quest] old hint",
            "  # [quest] python hint",
            "-- [quest] sql hint",
            "// regular comment",
            "code()",
        ]
        assert strip_annotations(lines) == ["// regular comment", "code()"]


class TestCommentLeader:
    @pytest.mark.parametrize("name,leader", [
        ("main.go", "//"),
        ("tool/cli.py", "#"),
        ("deploy.YAML", "#"),
        ("schema.sql", "--"),
        ("Makefile", "//"),
    ])
    def test_leader(self, name, leader):
        assert comment_leader(name) == leader


class TestApplyAnnotations:
    def test_idempotent(self, tmp_path):
        path = tmp_path / "app.go"
        path.write_text("\n".join(SIX_LINES) + "\n")
        batch = [ann(2, "a"), ann(5, "b"), ann(5, "c")]

        apply_annotations(batch, tmp_path)
        once = path.read_text()
        apply_annotations(batch, tmp_path)

        assert path.read_text() == once
        assert once.endswith("l6\n")
        assert once.count(ANNOTATION_TAG) == 3

    def test_new_batch_replaces_old(self, tmp_path):
        path = tmp_path / "app.go"
        path.write_text("\n".join(SIX_LINES))
        apply_annotations([ann(1, "first")], tmp_path)
        apply_annotations([ann(4, "second")], tmp_path)

        text = path.read_text()
        assert "first" not in text
        assert "    // [quest] second\n    l4" in text

    def test_python_file(self, tmp_path):
        path = tmp_path / "cli.py"
        path.write_text("def main():\n    pass\n")
        apply_annotations([ann(2, "Parse arguments here", file="cli.py")], tmp_path)
        assert path.read_text() == "def main():\n    # [quest] Parse arguments here\n    pass\n"

    def test_grouped_by_file(self, tmp_path):
        (tmp_path / "a.go").write_text("a1\na2")
        (tmp_path / "b.go").write_text("b1")
        placed = apply_annotations(
            [ann(2, "on a", file="a.go"), ann(1, "on b", file="b.go"), ann(1, "also a", file="a.go")],
            tmp_path,
        )
        assert [a.comment for a in placed] == ["also a", "on a", "on b"]
        assert (tmp_path / "a.go").read_text() == "// [quest] also a\na1\n// [quest] on a\na2"

    def test_missing_file_skipped(self, tmp_path):
        assert apply_annotations([ann(1, "nothing", file="ghost.go")], tmp_path) == []
        assert not (tmp_path / "ghost.go").exists()

    def test_outside_root_skipped(self, tmp_path):
        root = tmp_path / "project"
        root.mkdir()
        outside = tmp_path / "outside.go"
        outside.write_text("secret")

        assert apply_annotations([ann(1, "nope", file="../outside.go")], root) == []
        assert outside.read_text() == "secret"

    def test_read_failure_names_file(self, tmp_path):
        with pytest.raises(QuestIOError, match="missing.go"):
            apply_to_file(tmp_path / "missing.go", [ann(1, "x")])

    def test_non_utf8_file_skipped(self, tmp_path):
        path = tmp_path / "main.go"
        path.write_bytes(b"package main\n// caf\xe9\n")

        assert apply_annotations([ann(1, "hi", file="main.go")], tmp_path) == []
        assert path.read_bytes() == b"package main\n// caf\xe9\n"

    def test_non_utf8_file_named_in_error(self, tmp_path):
        path = tmp_path / "main.go"
        path.write_bytes(b"\xff\xfe")
        with pytest.raises(MalformedInputError, match="main.go"):
            apply_to_file(path, [ann(1, "x")])
