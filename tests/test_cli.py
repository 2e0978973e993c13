"""
Tests for minicc - Mini Compiler Command-Line Interface
=======================================================

These tests drive the click command through CliRunner inside an isolated
filesystem. The --build tests patch out nasm and ld.
"""

from pathlib import Path
from unittest.mock import Mock, patch

from click.testing import CliRunner

from stackcc.cli.errors import ExitCode
from stackcc.cli.minicc import main


PROGRAM = "let i = 0;\nwhile (i < 3) {\n    i = i + 1;\n}\n"


def run_minicc(args, files=None):
    """Invoke minicc in a fresh directory holding the given files."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        for name, text in (files or {"prog.mini": PROGRAM}).items():
            if isinstance(text, bytes):
                Path(name).write_bytes(text)
            else:
                Path(name).write_text(text)
        result = runner.invoke(main, args)
        produced = {
            p.name: p.read_text(errors="replace")
            for p in Path(".").iterdir() if p.is_file()
        }
    return result, produced


# =============================================================================
# Basic Options
# =============================================================================

class TestBasicOptions:
    """Tests for --help and --version."""

    def test_help(self):
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Compile Mini source code" in result.output
        assert "--build" in result.output

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "minicc" in result.output
        assert "1.0.0" in result.output

    def test_missing_input(self):
        result = CliRunner().invoke(main, ["nope.mini"])
        assert result.exit_code == 2


# =============================================================================
# Compilation
# =============================================================================

class TestCompilation:
    """Tests for writing assembly output."""

    def test_default_output_name(self):
        result, produced = run_minicc(["prog.mini"])
        assert result.exit_code == 0, result.output
        assert "Compiled prog.mini -> prog.asm" in result.output
        assert produced["prog.asm"].startswith("section .text\n")
        assert "L0:" in produced["prog.asm"]

    def test_explicit_output(self):
        result, produced = run_minicc(["prog.mini", "-o", "out.asm"])
        assert result.exit_code == 0
        assert "out.asm" in produced
        assert "prog.asm" not in produced

    def test_syntax_error(self):
        result, produced = run_minicc(["bad.mini"], {"bad.mini": "let x = 5\nlet y = 6;\n"})
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "bad.mini:2:1: error: expected ';'" in result.output
        assert "bad.asm" not in produced

    def test_undefined_variable(self):
        result, _ = run_minicc(["bad.mini"], {"bad.mini": "x = 1;\n"})
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "undefined variable 'x'" in result.output

    def test_asm_input_keeps_source(self):
        result, produced = run_minicc(["prog.asm"], {"prog.asm": PROGRAM})
        assert result.exit_code == 0, result.output
        assert "Compiled prog.asm -> prog.out.asm" in result.output
        assert produced["prog.asm"] == PROGRAM
        assert produced["prog.out.asm"].startswith("section .text\n")

    def test_output_same_as_input(self):
        result, produced = run_minicc(["prog.mini", "-o", "prog.mini"])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "would overwrite the input file" in result.output
        assert produced == {"prog.mini": PROGRAM}

    def test_invalid_utf8(self):
        result, produced = run_minicc(["bad.mini"], {"bad.mini": b"let x = 1;\n\xff\n"})
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "Error: bad.mini: not valid UTF-8 at byte 11" in result.output
        assert "Internal error" not in result.output
        assert "bad.asm" not in produced

    def test_literal_out_of_range(self):
        result, produced = run_minicc(["big.mini"], {"big.mini": "let x = " + "9" * 5000 + ";\n"})
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "big.mini:1:9: error: integer literal" in result.output
        assert "out of range" in result.output
        assert "big.asm" not in produced

    def test_verbose(self):
        result, _ = run_minicc(["-v", "prog.mini"])
        assert result.exit_code == 0


# =============================================================================
# Debug Dumps
# =============================================================================

class TestDumps:
    """Tests for --tokens and --ast."""

    def test_tokens(self):
        result, produced = run_minicc(["--tokens", "prog.mini"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "Token(LET, 'let', 1:1)"
        assert lines[-1].startswith("Token(END_OF_FILE, ''")
        assert "prog.asm" not in produced

    def test_ast(self):
        result, produced = run_minicc(["--ast", "prog.mini"])
        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "Program",
            "  Let i = 0",
            "  While ((i < 3))",
            "    Block",
            "      Assign i = (i + 1)",
        ]
        assert "prog.asm" not in produced


# =============================================================================
# Build
# =============================================================================

class TestBuild:
    """Tests for --build with the toolchain patched out."""

    def test_build(self):
        with patch("stackcc.toolchain.shutil.which", return_value="/usr/bin/tool"), \
                patch("stackcc.toolchain.subprocess.run",
                      return_value=Mock(returncode=0, stdout="", stderr="")) as run:
            result, produced = run_minicc(["--build", "prog.mini"])

        assert result.exit_code == 0, result.output
        assert "Executable created: prog" in result.output
        assert "prog.asm" in produced
        commands = [c[0][0] for c in run.call_args_list]
        assert commands == [
            ["nasm", "-f", "elf64", "prog.asm", "-o", "prog.o"],
            ["ld", "prog.o", "-o", "prog"],
        ]

    def test_build_custom_tools(self):
        with patch("stackcc.toolchain.shutil.which", return_value="/usr/bin/tool"), \
                patch("stackcc.toolchain.subprocess.run",
                      return_value=Mock(returncode=0, stdout="", stderr="")) as run:
            result, _ = run_minicc(["-b", "--nasm", "yasm", "--ld", "ld.lld", "prog.mini"])

        assert result.exit_code == 0
        assert [c[0][0][0] for c in run.call_args_list] == ["yasm", "ld.lld"]

    def test_build_input_without_suffix(self):
        with patch("stackcc.toolchain.shutil.which", return_value="/usr/bin/tool"), \
                patch("stackcc.toolchain.subprocess.run",
                      return_value=Mock(returncode=0, stdout="", stderr="")) as run:
            result, _ = run_minicc(["--build", "prog"], {"prog": PROGRAM})

        assert result.exit_code == 0
        assert run.call_args_list[-1][0][0] == ["ld", "prog.o", "-o", "prog.out"]

    def test_missing_assembler(self):
        with patch("stackcc.toolchain.shutil.which", return_value=None):
            result, produced = run_minicc(["--build", "prog.mini"])

        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Error: nasm: 'nasm' not found on PATH" in result.output
        assert "prog.asm" in produced
