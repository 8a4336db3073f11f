"""
Tests for the indent-tracking file builder and the atomic writer.
"""

import ast

import pytest

from service_model_generate.pipeline.emission.atomic_writer import AtomicWriter
from service_model_generate.pipeline.emission.file_builder import FileBuilder
from service_model_generate.pipeline.emission.validation_rules import MinimumRule
from service_model_generate.pipeline.errors import FileBuilderError, FileEmissionError


class TestFileBuilder:
    """Test cases for FileBuilder"""

    def test_indent_flags(self):
        builder = FileBuilder()
        builder.append_line("class Foo:", post_inc=True)
        builder.append_line("def bar(self):", post_inc=True)
        builder.append_line("return 1", post_dec=True)
        builder.append_line("x = 2", post_dec=True)
        builder.append_line("y = 3")
        assert builder.contents() == "class Foo:\n    def bar(self):\n        return 1\n    x = 2\ny = 3\n"

    def test_pre_flags(self):
        builder = FileBuilder()
        builder.append_line("a", post_inc=True)
        builder.append_line("b", pre_dec=True)
        builder.append_line("c", pre_inc=True)
        assert builder.lines == ["a", "b", "    c"]

    def test_decrement_below_zero_raises(self):
        builder = FileBuilder()
        with pytest.raises(FileBuilderError):
            builder.dec_indent()
        with pytest.raises(FileBuilderError):
            builder.append_line("x", post_dec=True)

    def test_multi_line_text_is_dedented(self):
        builder = FileBuilder()
        builder.append_line("def f():", post_inc=True)
        builder.append_line("""
            if x:
                return 1

            return 2
            """)
        assert builder.lines == [
            "def f():",
            "    if x:",
            "        return 1",
            "",
            "    return 2",
        ]

    def test_single_line_keeps_leading_whitespace(self):
        builder = FileBuilder()
        builder.append_line("if value < 1:")
        builder.append_line('    raise ValidationError("too small")')
        builder.append_line("def f():", post_inc=True)
        builder.append_line("    input: The input")
        assert builder.lines == [
            "if value < 1:",
            '    raise ValidationError("too small")',
            "def f():",
            "        input: The input",
        ]

    def test_validation_rule_lines_parse(self, tmp_path):
        builder = FileBuilder()
        builder.append_line("def validate(value):", post_inc=True)
        for line in MinimumRule("value", "MaxResults", 1).generate_code():
            builder.append_line(line)
        builder.dec_indent()
        path = builder.write("Check.py", tmp_path)
        assert ast.parse(path.read_text())

    def test_empty_line_has_no_indent(self):
        builder = FileBuilder()
        builder.inc_indent()
        builder.append_empty_line()
        builder.append_line("")
        assert builder.lines == ["", ""]

    def test_reset(self):
        builder = FileBuilder()
        builder.append_line("x", post_inc=True)
        builder.reset()
        assert builder.lines == []
        assert builder.indent_level == 0

    def test_write_creates_directories(self, tmp_path):
        builder = FileBuilder()
        builder.append_line("x = 1")
        path = builder.write("module.py", tmp_path / "package" / "nested")
        assert path == tmp_path / "package" / "nested" / "module.py"
        assert path.read_text() == "x = 1\n"

    def test_write_invalid_python_raises(self, tmp_path):
        builder = FileBuilder()
        builder.append_line("def broken(:")
        with pytest.raises(FileEmissionError, match="module.py"):
            builder.write("module.py", tmp_path)
        assert not (tmp_path / "module.py").exists()

    def test_write_without_validation(self, tmp_path):
        builder = FileBuilder(validate=False)
        builder.append_line("def broken(:")
        path = builder.write("module.py", tmp_path)
        assert path.read_text() == "def broken(:\n"


class TestAtomicWriter:
    """Test cases for AtomicWriter"""

    def test_write(self, tmp_path):
        path = tmp_path / "out.py"
        AtomicWriter().write(path, "x = 1\n")
        assert path.read_text() == "x = 1\n"
        assert list(tmp_path.iterdir()) == [path]

    def test_invalid_python_leaves_no_file(self, tmp_path):
        path = tmp_path / "out.py"
        with pytest.raises(FileEmissionError):
            AtomicWriter().write(path, "class :\n")
        assert list(tmp_path.iterdir()) == []

    def test_invalid_python_keeps_previous_content(self, tmp_path):
        path = tmp_path / "out.py"
        path.write_text("x = 1\n")
        with pytest.raises(FileEmissionError):
            AtomicWriter().write(path, "class :\n")
        assert path.read_text() == "x = 1\n"

    def test_non_python_files_are_not_validated(self, tmp_path):
        path = tmp_path / "pyproject.toml"
        AtomicWriter().write(path, "class :\n")
        assert path.read_text() == "class :\n"

    def test_custom_validator(self, tmp_path):
        def reject(content):
            raise FileEmissionError("rejected")

        with pytest.raises(FileEmissionError, match="rejected"):
            AtomicWriter(validate_python=reject).write(tmp_path / "out.py", "x = 1\n")
        assert list(tmp_path.iterdir()) == []


if __name__ == "__main__":
    pytest.main([__file__])
