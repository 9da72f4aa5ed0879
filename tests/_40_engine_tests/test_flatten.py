# tests/_40_engine_tests/test_flatten.py
"""Tests for shell_flatten.flatten (the line-by-line driver)."""

from pathlib import Path

import pytest

import shell_flatten.flatten as mod_flatten
from tests.utils import make_job, write_files


def _flatten(tmp_path: Path, files: dict[str, str]) -> str:
    write_files(tmp_path, files)
    return mod_flatten.flatten_script(tmp_path / "main.sh", cwd=tmp_path)


# ---------------------------------------------------------------------------
# selective inlining
# ---------------------------------------------------------------------------


def test_only_used_functions_are_inlined(tmp_path: Path) -> None:
    # --- setup / execute ---
    result = _flatten(
        tmp_path,
        {
            "main.sh": ". lib.sh\ngreet\n",
            "lib.sh": """\
                greet() { echo hi; }
                helper() { echo unused; }
                """,
        },
    )

    # --- verify ---
    assert result == "greet() { echo hi; }\n\ngreet\n"


def test_transitive_calls_are_inlined_in_sorted_order(tmp_path: Path) -> None:
    result = _flatten(
        tmp_path,
        {
            "main.sh": ". lib.sh\ngreet\n",
            "lib.sh": """\
                greet() { helper; }
                helper() { echo hi; }
                """,
        },
    )

    assert result == "greet() { helper; }\n\nhelper() { echo hi; }\n\ngreet\n"


def test_emission_order_is_ordinal(tmp_path: Path) -> None:
    """Upper-case names sort before lower-case ones."""
    write_files(
        tmp_path,
        {
            "main.sh": ". lib.sh\nalpha; Zeta\n",
            "lib.sh": "alpha() { :; }\nZeta() { :; }\n",
        },
    )

    flattener = mod_flatten.Flattener(tmp_path / "main.sh", cwd=tmp_path)
    flattener.run()

    assert flattener.emitted == ["Zeta", "alpha"]


def test_first_emitted_definition_wins(tmp_path: Path) -> None:
    result = _flatten(
        tmp_path,
        {
            "main.sh": ". lib1.sh\n. lib2.sh\nsay\n",
            "lib1.sh": "say() { echo one; }\n",
            "lib2.sh": "say() { echo two; }\n",
        },
    )

    assert result == "say() { echo one; }\n\nsay\n"
    assert "echo two" not in result


def test_closure_spans_libraries_loaded_later(tmp_path: Path) -> None:
    """A call into a later library is satisfied at that library's directive."""
    result = _flatten(
        tmp_path,
        {
            "main.sh": ". lib_a.sh\n. lib_b.sh\na_fn\n",
            "lib_a.sh": "a_fn() { b_fn; }\n",
            "lib_b.sh": "b_fn() { echo b; }\n",
        },
    )

    assert result == "a_fn() { b_fn; }\n\nb_fn() { echo b; }\n\na_fn\n"


def test_nested_library_functions_come_from_their_own_file(
    tmp_path: Path,
) -> None:
    result = _flatten(
        tmp_path,
        {
            "main.sh": ". lazy.lib\ntop\n",
            "lazy.lib": """\
                . parts/a.sh
                top() { a_fn; }
                """,
            "parts/a.sh": """\
                a_fn() {
                  # from the part file
                  echo a
                }
                """,
        },
    )

    assert result == (
        "a_fn() {\n  # from the part file\n  echo a\n}\n\ntop() { a_fn; }\n\ntop\n"
    )


# ---------------------------------------------------------------------------
# usage detection
# ---------------------------------------------------------------------------


def test_names_in_comments_do_not_count_as_usage(tmp_path: Path) -> None:
    result = _flatten(
        tmp_path,
        {
            "main.sh": ". lib.sh\n# call helper later\necho hi # helper\n",
            "lib.sh": "helper() { :; }\n",
        },
    )

    assert result == "# call helper later\necho hi # helper\n"


def test_usage_is_a_substring_match(tmp_path: Path) -> None:
    """A name inside a longer word is still treated as used."""
    result = _flatten(
        tmp_path,
        {
            "main.sh": ". lib.sh\necho google\n",
            "lib.sh": "go() { :; }\n",
        },
    )

    assert result == "go() { :; }\n\necho google\n"


def test_usage_counts_calls_after_the_directive(tmp_path: Path) -> None:
    result = _flatten(
        tmp_path,
        {
            "main.sh": "echo start\n. lib.sh\necho middle\nlate_fn\n",
            "lib.sh": "late_fn() { :; }\n",
        },
    )

    assert result == "echo start\nlate_fn() { :; }\n\necho middle\nlate_fn\n"


def test_usage_text_strips_comments_and_load_lines() -> None:
    lines = [
        "#!/bin/bash",
        "  # indented comment",
        ". lib.sh",
        "source other.sh",
        "run_it # helper",
        'echo "#notacomment"',
    ]

    assert mod_flatten.usage_text(lines) == 'run_it\necho "#notacomment"'


# ---------------------------------------------------------------------------
# empty extraction
# ---------------------------------------------------------------------------


def test_empty_extraction_is_marked_processed(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    write_files(
        tmp_path,
        {
            "main.sh": ". lib.sh\n. lib.sh\ngreet\n",
            "lib.sh": "greet() { echo hi; }\n",
        },
    )
    calls: list[str] = []

    def fake_extract(name: str, _defining_file: Path) -> str:
        calls.append(name)
        return ""

    monkeypatch.setattr(mod_flatten, "extract_definition", fake_extract)

    flattener = mod_flatten.Flattener(tmp_path / "main.sh", cwd=tmp_path)
    lines = flattener.run()

    assert lines == ["greet"]
    assert flattener.processed == {"greet"}
    assert flattener.emitted == []
    assert calls == ["greet"]  # second directive skips it


# ---------------------------------------------------------------------------
# include directive and pass-through
# ---------------------------------------------------------------------------


def test_include_pastes_file_verbatim(tmp_path: Path) -> None:
    result = _flatten(
        tmp_path,
        {
            "main.sh": "###Include: banner.txt\necho done\n",
            "banner.txt": "# banner\n. not_a_library.sh\nno_newline",
        },
    )

    assert result == "# banner\n. not_a_library.sh\nno_newline\necho done\n"


def test_include_missing_file_raises(tmp_path: Path) -> None:
    write_files(tmp_path, {"main.sh": "###include: nope.txt\n"})

    with pytest.raises(FileNotFoundError, match="include file"):
        mod_flatten.flatten_script(tmp_path / "main.sh", cwd=tmp_path)


def test_blank_line_runs_are_squeezed(tmp_path: Path) -> None:
    result = _flatten(
        tmp_path,
        {
            "main.sh": "#!/bin/bash\n\n\n. lib.sh\n\n\ngreet\n",
            "lib.sh": "greet() { :; }\n",
        },
    )

    assert result == "#!/bin/bash\n\ngreet() { :; }\n\ngreet\n"


def test_blank_lines_inside_includes_are_squeezed(tmp_path: Path) -> None:
    result = _flatten(
        tmp_path,
        {
            "main.sh": "###Include: banner.txt\necho done\n",
            "banner.txt": "# banner\n\n\n\n# end\n",
        },
    )

    assert result == "# banner\n\n# end\necho done\n"


def test_other_lines_pass_through_unchanged(tmp_path: Path) -> None:
    script = "#!/bin/bash\n  indented  \t\nsourced=1\n./run.sh\necho 'a . b'\n"

    result = _flatten(tmp_path, {"main.sh": script})

    assert result == script


def test_missing_final_newline_is_supplied(tmp_path: Path) -> None:
    result = _flatten(tmp_path, {"main.sh": "echo a\necho b"})
    assert result == "echo a\necho b\n"


@pytest.mark.parametrize(
    ("lines", "expected"),
    [
        ([], []),
        (["", "", ""], [""]),
        (["a", "", "", "b", "", "c", "", ""], ["a", "", "b", "", "c", ""]),
        (["a", " ", " ", "b"], ["a", " ", " ", "b"]),  # spaces are not empty
    ],
)
def test_squeeze_blank_lines(lines: list[str], expected: list[str]) -> None:
    assert list(mod_flatten.squeeze_blank_lines(lines)) == expected


# ---------------------------------------------------------------------------
# path resolution and errors
# ---------------------------------------------------------------------------


def test_library_beside_script_is_found_when_not_under_cwd(tmp_path: Path) -> None:
    write_files(
        tmp_path,
        {
            "bin/main.sh": ". lib.sh\nhello\n",
            "bin/lib.sh": "hello() { echo hello; }\n",
        },
    )

    result = mod_flatten.flatten_script(tmp_path / "bin" / "main.sh", cwd=tmp_path)

    assert result == "hello() { echo hello; }\n\nhello\n"


def test_missing_library_raises(tmp_path: Path) -> None:
    write_files(tmp_path, {"main.sh": ". missing.sh\n"})

    with pytest.raises(FileNotFoundError, match="missing.sh"):
        mod_flatten.flatten_script(tmp_path / "main.sh", cwd=tmp_path)


def test_trailing_comment_on_directive_is_part_of_the_path(tmp_path: Path) -> None:
    write_files(
        tmp_path,
        {
            "main.sh": ". lib.sh # helpers\ngreet\n",
            "lib.sh": "greet() { :; }\n",
        },
    )

    with pytest.raises(FileNotFoundError):
        mod_flatten.flatten_script(tmp_path / "main.sh", cwd=tmp_path)


def test_missing_main_script_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="main script"):
        mod_flatten.flatten_script(tmp_path / "main.sh", cwd=tmp_path)


def test_circular_library_load_raises(tmp_path: Path) -> None:
    write_files(
        tmp_path,
        {
            "main.sh": ". a.sh\n",
            "a.sh": ". b.sh\n",
            "b.sh": ". a.sh\n",
        },
    )

    with pytest.raises(RuntimeError, match="Circular"):
        mod_flatten.flatten_script(tmp_path / "main.sh", cwd=tmp_path)


# ---------------------------------------------------------------------------
# redefinitions across directives
# ---------------------------------------------------------------------------


def test_redefined_emitted_name_pulls_in_new_callees(tmp_path: Path) -> None:
    """An emitted name is walked again after a later library redefines it.

    The first body stays in the output, but the second body's callees are
    inlined at the later directive anyway.
    """
    result = _flatten(
        tmp_path,
        {
            "main.sh": ". lib1.sh\n. lib2.sh\na\n",
            "lib1.sh": "a() { :; }\n",
            "lib2.sh": "a() { b; }\nb() { :; }\n",
        },
    )

    assert result == "a() { :; }\n\nb() { :; }\n\na\n"
    assert "a() { b; }" not in result


# ---------------------------------------------------------------------------
# run_flatten
# ---------------------------------------------------------------------------


def test_run_flatten_writes_stdout_when_no_out(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_files(
        tmp_path,
        {
            "main.sh": ". lib.sh\ngreet\n",
            "lib.sh": "greet() { echo hi; }\n",
        },
    )

    flattener = mod_flatten.run_flatten(make_job(tmp_path))

    captured = capsys.readouterr()
    assert captured.out == "greet() { echo hi; }\n\ngreet\n"
    assert flattener.emitted == ["greet"]


def test_run_flatten_stdout_keeps_raw_bytes(
    tmp_path: Path,
    capsysbinary: pytest.CaptureFixture[bytes],
) -> None:
    (tmp_path / "main.sh").write_bytes(b'echo "caf\xe9"\n')

    mod_flatten.run_flatten(make_job(tmp_path))

    assert capsysbinary.readouterr().out == b'echo "caf\xe9"\n'


def test_run_flatten_writes_out_file(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    write_files(
        tmp_path,
        {
            "main.sh": ". lib.sh\ngreet\n",
            "lib.sh": "greet() { echo hi; }\n",
        },
    )

    mod_flatten.run_flatten(make_job(tmp_path, out="dist/flat.sh"))

    out_file = tmp_path / "dist" / "flat.sh"
    assert out_file.read_text() == "greet() { echo hi; }\n\ngreet\n"
    captured = capsys.readouterr()
    assert "Flattened" in captured.out
    assert "1 function inlined" in captured.out


def test_run_flatten_returns_every_file_read(tmp_path: Path) -> None:
    files = write_files(
        tmp_path,
        {
            "main.sh": ". lib.sh\nf\n###Include: banner.txt\n",
            "lib.sh": ". nested.sh\nf() { g; }\n",
            "nested.sh": "g() { :; }\n",
            "banner.txt": "# hi\n",
        },
    )

    flattener = mod_flatten.run_flatten(make_job(tmp_path, out="out/main.sh"))

    assert flattener.sources == {
        files["main.sh"],
        files["lib.sh"],
        files["nested.sh"],
        files["banner.txt"],
    }
    assert (tmp_path / "out" / "main.sh").read_text() == (
        "f() { g; }\n\ng() { :; }\n\nf\n# hi\n"
    )
